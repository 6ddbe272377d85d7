from pydantic import BaseModel, Field
from enum import Enum
from datetime import date
from typing import Optional, List, Literal, Dict, Any

Sex = Literal["male", "female"]

class DogStatus(str, Enum):
    active   = "active"
    breeding = "breeding"
    retired  = "retired"
    sold     = "sold"
    deceased = "deceased"
    coowned  = "coowned"

class Title(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    organization: Optional[str] = None
    date: Optional[str] = None

class DogCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    call_name: Optional[str] = Field(None, max_length=100)
    registration_number: Optional[str] = Field(None, max_length=100)
    chip_number: Optional[str] = Field(None, max_length=50)
    breed: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, max_length=100)
    birth_date: date
    death_date: Optional[date] = None
    sex: Sex
    status: DogStatus = DogStatus.active
    sire_id: Optional[str] = None   # referencia débil a otro perro (macho)
    dam_id: Optional[str] = None    # referencia débil a otro perro (hembra)
    photo_main_url: Optional[str] = None
    titles: List[Title] = []
    health_tests: List[Dict[str, Any]] = []
    notes: Optional[str] = None

class DogUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    call_name: Optional[str] = None
    registration_number: Optional[str] = None
    chip_number: Optional[str] = None
    breed: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None
    birth_date: Optional[date] = None
    death_date: Optional[date] = None
    sex: Optional[Sex] = None
    status: Optional[DogStatus] = None
    sire_id: Optional[str] = None
    dam_id: Optional[str] = None
    photo_main_url: Optional[str] = None
    titles: Optional[List[Title]] = None
    health_tests: Optional[List[Dict[str, Any]]] = None
    notes: Optional[str] = None

class DogOut(DogCreate):
    id: str
    age: Optional[str] = None

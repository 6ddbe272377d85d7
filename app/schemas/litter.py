from pydantic import BaseModel, Field
from enum import Enum
from datetime import date
from typing import Optional, List, Literal, Dict, Any

from .puppy import PuppyOut, PuppyStatus

MatingType = Literal["natural", "artificial_fresh", "artificial_frozen"]
BirthType = Literal["natural", "cesarean", "assisted"]

class LitterStatus(str, Enum):
    planned   = "planned"
    confirmed = "confirmed"
    pregnant  = "pregnant"
    born      = "born"
    weaned    = "weaned"
    closed    = "closed"
    cancelled = "cancelled"

class MatingCreate(BaseModel):
    dam_id: str
    sire_id: str
    mating_date: date
    mating_type: MatingType = "natural"
    heat_start_date: Optional[date] = None
    notes: Optional[str] = None

class PregnancyConfirm(BaseModel):
    confirmation_date: date
    method: str = Field("ultrasound", max_length=50)
    notes: Optional[str] = None

class PuppyBirth(BaseModel):
    sex: Literal["male", "female"]
    identifier: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = None
    color: Optional[str] = None
    birth_weight: Optional[float] = Field(None, gt=0, description="Peso al nacer (g)")
    status: PuppyStatus = PuppyStatus.available
    notes: Optional[str] = None

class BirthCreate(BaseModel):
    birth_date: date
    birth_type: BirthType = "natural"
    puppies: List[PuppyBirth] = Field(default_factory=list, max_length=30)
    notes: Optional[str] = None

class LitterOut(BaseModel):
    id: str
    name: Optional[str] = None
    dam_id: str
    sire_id: str
    status: LitterStatus
    heat_start_date: Optional[date] = None
    mating_date: Optional[date] = None
    mating_type: Optional[MatingType] = None
    pregnancy_confirmed_date: Optional[date] = None
    expected_birth_date: Optional[date] = None
    actual_birth_date: Optional[date] = None
    birth_type: Optional[BirthType] = None
    puppies_born_count: int = 0
    puppies_alive_count: int = 0
    males_count: int = 0
    females_count: int = 0
    notes: Optional[str] = None

class LitterEventOut(BaseModel):
    litter: LitterOut
    event: Optional[Dict[str, Any]] = None
    message: str

class BirthOut(LitterEventOut):
    puppies: List[PuppyOut] = []

class HeatCreate(BaseModel):
    dam_id: str
    heat_date: Optional[date] = None    # por defecto, hoy
    notes: Optional[str] = None

class HeatOut(BaseModel):
    event: Dict[str, Any]
    message: str

class LitterCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)

class ReproductionHistoryOut(BaseModel):
    events: List[Dict[str, Any]]
    litters: List[LitterOut]

from pydantic import BaseModel, Field
from enum import Enum
from datetime import date
from typing import Optional, Literal

class PuppyStatus(str, Enum):
    available = "available"
    reserved  = "reserved"
    sold      = "sold"
    retained  = "retained"
    deceased  = "deceased"
    returned  = "returned"

class PuppyOut(BaseModel):
    id: str
    litter_id: str
    identifier: str
    name: Optional[str] = None
    sex: Literal["male", "female"]
    color: Optional[str] = None
    birth_weight: Optional[float] = None
    birth_order: Optional[int] = None
    status: PuppyStatus
    buyer_id: Optional[str] = None
    price: Optional[float] = None
    reservation_date: Optional[date] = None
    sale_date: Optional[date] = None
    photo_main_url: Optional[str] = None
    notes: Optional[str] = None

class PuppyPatch(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    color: Optional[str] = None
    status: Optional[PuppyStatus] = None
    buyer_id: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    reservation_date: Optional[date] = None
    sale_date: Optional[date] = None
    notes: Optional[str] = None

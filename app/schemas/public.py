import re
from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import date
from typing import Optional

class PublicParent(BaseModel):
    id: str
    name: str
    breed: Optional[str] = None
    color: Optional[str] = None
    photo_main_url: Optional[str] = None

class PublicPuppyOut(BaseModel):
    id: str
    identifier: str
    name: str
    sex: str
    color: Optional[str] = None
    status: str
    photo_url: Optional[str] = None
    birth_date: Optional[date] = None
    breed: Optional[str] = None
    price: Optional[float] = None
    sire: Optional[PublicParent] = None
    dam: Optional[PublicParent] = None

class InterestCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=80)
    email: EmailStr
    phone: str = Field(..., max_length=20)
    city: Optional[str] = Field(None, max_length=100)
    message: Optional[str] = Field(None, max_length=2000)
    puppy_id: Optional[str] = None
    puppy_name: Optional[str] = None
    contact_whatsapp: bool = False
    privacy_accepted: bool

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        cleaned = re.sub(r"[\s\-()]", "", v)
        if not re.match(r"^\+?\d{9,15}$", cleaned):
            raise ValueError("Formato de teléfono inválido. Use formato internacional (ej: +5511999998888)")
        return v

    @field_validator("privacy_accepted")
    @classmethod
    def must_accept_privacy(cls, v: bool) -> bool:
        if not v:
            raise ValueError("Debe aceptar la política de privacidad")
        return v

class InterestOut(BaseModel):
    id: str
    message: str

from pydantic import BaseModel, EmailStr, Field
from enum import Enum
from typing import Optional

class PersonType(str, Enum):
    interested   = "interested"
    buyer        = "buyer"
    veterinarian = "veterinarian"
    handler      = "handler"
    partner      = "partner"
    other        = "other"

class PersonBase(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    phone_secondary: Optional[str] = Field(None, max_length=30)
    address_street: Optional[str] = Field(None, max_length=255)
    address_number: Optional[str] = Field(None, max_length=20)
    address_complement: Optional[str] = Field(None, max_length=100)
    address_neighborhood: Optional[str] = Field(None, max_length=100)
    address_city: Optional[str] = Field(None, max_length=100)
    address_state: Optional[str] = Field(None, max_length=50)
    address_zip: Optional[str] = Field(None, max_length=20)
    address_country: Optional[str] = Field(None, max_length=50)
    document_cpf: Optional[str] = Field(None, max_length=20)
    document_rg: Optional[str] = Field(None, max_length=30)
    referred_by_id: Optional[str] = None
    notes: Optional[str] = None

class PersonCreate(PersonBase):
    name: str = Field(..., min_length=1, max_length=255)
    type: PersonType = PersonType.interested

class PersonUpdate(PersonBase):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[PersonType] = None

class PersonOut(PersonBase):
    id: str
    name: str
    type: PersonType
    # los registros antiguos pueden traer emails que hoy no validarían
    email: Optional[str] = None

class PersonOption(BaseModel):
    """Versión reducida para selectores (comprador, veterinario...)."""
    id: str
    name: str
    phone: Optional[str] = None
    type: PersonType

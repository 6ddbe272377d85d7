from pydantic import BaseModel, Field
from datetime import date
from typing import Optional

from .event import EntityType

class HealthRecordBase(BaseModel):
    entity_type: EntityType = "dog"
    entity_id: str
    event_date: Optional[date] = None   # por defecto, hoy
    notes: Optional[str] = None

class VaccineCreate(HealthRecordBase):
    name: str = Field(..., min_length=1, max_length=255)
    manufacturer: Optional[str] = None
    batch: Optional[str] = Field(None, max_length=100)
    next_dose_date: Optional[date] = None

class DewormingCreate(HealthRecordBase):
    product: str = Field(..., min_length=1, max_length=255)
    dosage: Optional[str] = None
    next_dose_date: Optional[date] = None

class ExamCreate(HealthRecordBase):
    type: str = Field(..., min_length=1, max_length=100)
    result: Optional[str] = None

class MedicationCreate(HealthRecordBase):
    name: str = Field(..., min_length=1, max_length=255)
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    end_date: Optional[date] = None

class SurgeryCreate(HealthRecordBase):
    type: str = Field(..., min_length=1, max_length=100)
    veterinarian: Optional[str] = None

class VetVisitCreate(HealthRecordBase):
    reason: Optional[str] = None
    veterinarian: Optional[str] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    next_visit_date: Optional[date] = None

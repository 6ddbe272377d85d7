from pydantic import BaseModel, Field
from datetime import date
from typing import Optional, Literal, Dict, Any

EntityType = Literal["dog", "litter", "puppy"]
EventType = Literal[
    "heat", "mating", "pregnancy_test", "birth",
    "vaccine", "deworming", "exam", "medication", "surgery", "vet_visit",
    "weighing", "grooming", "training", "show", "note",
]

class EventCreate(BaseModel):
    entity_type: EntityType
    entity_id: str
    event_type: EventType
    event_date: date
    payload: Dict[str, Any] = Field(default_factory=dict)
    notes: Optional[str] = None
    reminder_date: Optional[date] = None

class EventOut(BaseModel):
    id: str
    entity_type: EntityType
    entity_id: str
    event_type: EventType
    event_date: date
    payload: Dict[str, Any] = {}
    notes: Optional[str] = None
    reminder_date: Optional[date] = None
    reminder_completed: Optional[bool] = None
    created_by: Optional[str] = None

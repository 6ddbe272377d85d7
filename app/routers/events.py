# app/routers/events.py
# Historial de eventos y recordatorios de perros, camadas y cachorros.
from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
import logging

from ..repositories import (
    DogRepository, LitterRepository, PuppyRepository, EventRepository,
    get_dog_repository, get_litter_repository, get_puppy_repository, get_event_repository,
)
from ..security import get_current_user, require_capability
from ..services.events import EventService, ensure_entity
from ..schemas.event import EventCreate, EventOut, EntityType, EventType

logger = logging.getLogger(__name__)

router = APIRouter()

async def get_event_service(events: EventRepository = Depends(get_event_repository)) -> EventService:
    return EventService(events)

@router.get("", response_model=List[EventOut])
async def list_events(
    entity_type: Optional[EntityType] = None,
    event_type: Optional[EventType] = None,
    limit: int = Query(100, ge=1, le=500),
    current=Depends(get_current_user),
    events: EventRepository = Depends(get_event_repository),
):
    filters = {"entity_type": entity_type, "event_type": event_type}
    return await events.find_all(filters, limit=limit, sort_by="event_date", descending=True)

@router.get("/upcoming", response_model=List[EventOut])
async def upcoming_events(
    days: int = Query(30, ge=1, le=365),
    current=Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    return await service.upcoming(days)

@router.get("/reminders", response_model=List[EventOut])
async def pending_reminders(
    current=Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    """Recordatorios vencidos y aún sin completar."""
    return await service.pending_reminders()

@router.get("/by-entity/{entity_type}/{entity_id}", response_model=List[EventOut])
async def events_by_entity(
    entity_type: EntityType,
    entity_id: str,
    current=Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    return await service.by_entity(entity_type, entity_id)

@router.get("/{event_id}", response_model=EventOut)
async def get_event(
    event_id: str,
    current=Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    return await service.get(event_id)

@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    current=Depends(require_capability("manage_kennel")),
    service: EventService = Depends(get_event_service),
    dogs: DogRepository = Depends(get_dog_repository),
    litters: LitterRepository = Depends(get_litter_repository),
    puppies: PuppyRepository = Depends(get_puppy_repository),
):
    await ensure_entity(payload.entity_type, payload.entity_id, dogs, litters, puppies)
    event = await service.add(
        payload.entity_type,
        payload.entity_id,
        payload.event_type,
        payload.event_date.isoformat(),
        payload.payload,
        payload.notes,
        reminder_date=payload.reminder_date.isoformat() if payload.reminder_date else None,
        created_by=current["id"],
    )
    logger.info("Evento %s creado para %s %s", payload.event_type, payload.entity_type, payload.entity_id)
    return event

@router.post("/{event_id}/complete-reminder", response_model=EventOut)
async def complete_reminder(
    event_id: str,
    current=Depends(require_capability("manage_kennel")),
    service: EventService = Depends(get_event_service),
):
    return await service.complete_reminder(event_id)

@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: str,
    current=Depends(require_capability("manage_kennel")),
    service: EventService = Depends(get_event_service),
):
    await service.delete(event_id)
    return None

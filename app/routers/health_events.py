# app/routers/health_events.py
# Registros de salud. Va bajo /health-events: /health es el healthcheck de la app.
from fastapi import APIRouter, Depends, status, Query
from typing import List

from ..repositories import (
    DogRepository, LitterRepository, PuppyRepository, EventRepository,
    get_dog_repository, get_litter_repository, get_puppy_repository, get_event_repository,
)
from ..security import get_current_user, require_capability
from ..services.health import HealthService
from ..schemas.event import EntityType, EventOut
from ..schemas.health import (
    HealthRecordBase, VaccineCreate, DewormingCreate, ExamCreate, MedicationCreate,
    SurgeryCreate, VetVisitCreate,
)

router = APIRouter()

can_record = require_capability("manage_kennel")

async def get_health_service(
    dogs: DogRepository = Depends(get_dog_repository),
    litters: LitterRepository = Depends(get_litter_repository),
    puppies: PuppyRepository = Depends(get_puppy_repository),
    events: EventRepository = Depends(get_event_repository),
) -> HealthService:
    return HealthService(dogs, litters, puppies, events)

async def _record(event_type: str, payload: HealthRecordBase, current: dict, service: HealthService):
    data = payload.model_dump(mode="json", exclude={"entity_type", "entity_id", "event_date", "notes"})
    return await service.record(
        event_type,
        payload.entity_type,
        payload.entity_id,
        payload.event_date.isoformat() if payload.event_date else None,
        data,
        payload.notes,
        created_by=current["id"],
    )

@router.post("/vaccine", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def record_vaccine(
    payload: VaccineCreate,
    current=Depends(can_record),
    service: HealthService = Depends(get_health_service),
):
    """Vacuna; `next_dose_date` queda como recordatorio."""
    return await _record("vaccine", payload, current, service)

@router.post("/deworming", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def record_deworming(
    payload: DewormingCreate,
    current=Depends(can_record),
    service: HealthService = Depends(get_health_service),
):
    return await _record("deworming", payload, current, service)

@router.post("/exam", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def record_exam(
    payload: ExamCreate,
    current=Depends(can_record),
    service: HealthService = Depends(get_health_service),
):
    return await _record("exam", payload, current, service)

@router.post("/medication", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def record_medication(
    payload: MedicationCreate,
    current=Depends(can_record),
    service: HealthService = Depends(get_health_service),
):
    return await _record("medication", payload, current, service)

@router.post("/surgery", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def record_surgery(
    payload: SurgeryCreate,
    current=Depends(can_record),
    service: HealthService = Depends(get_health_service),
):
    return await _record("surgery", payload, current, service)

@router.post("/vet-visit", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def record_vet_visit(
    payload: VetVisitCreate,
    current=Depends(can_record),
    service: HealthService = Depends(get_health_service),
):
    return await _record("vet_visit", payload, current, service)

@router.get("/history/{entity_type}/{entity_id}", response_model=List[EventOut])
async def health_history(
    entity_type: EntityType,
    entity_id: str,
    current=Depends(get_current_user),
    service: HealthService = Depends(get_health_service),
):
    return await service.history(entity_type, entity_id)

@router.get("/upcoming-vaccines", response_model=List[EventOut])
async def upcoming_vaccines(
    days: int = Query(30, ge=1, le=365),
    current=Depends(get_current_user),
    service: HealthService = Depends(get_health_service),
):
    return await service.upcoming("vaccine", days)

@router.get("/upcoming-dewormings", response_model=List[EventOut])
async def upcoming_dewormings(
    days: int = Query(30, ge=1, le=365),
    current=Depends(get_current_user),
    service: HealthService = Depends(get_health_service),
):
    return await service.upcoming("deworming", days)

@router.get("/overdue", response_model=List[EventOut])
async def overdue(
    current=Depends(get_current_user),
    service: HealthService = Depends(get_health_service),
):
    return await service.overdue()

# app/routers/litters.py
from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional

from ..config import get_settings
from ..repositories import (
    DogRepository, LitterRepository, PuppyRepository, EventRepository,
    get_dog_repository, get_litter_repository, get_puppy_repository, get_event_repository,
)
from ..security import get_current_user, require_capability
from ..services.reproduction import ReproductionService
from ..schemas.litter import (
    LitterOut, LitterStatus, MatingCreate, PregnancyConfirm, BirthCreate, LitterEventOut, BirthOut,
    HeatCreate, HeatOut, LitterCancel, ReproductionHistoryOut,
)
from ..schemas.event import EventOut
from ..schemas.puppy import PuppyOut

router = APIRouter()
settings = get_settings()

async def get_reproduction_service(
    dogs: DogRepository = Depends(get_dog_repository),
    litters: LitterRepository = Depends(get_litter_repository),
    puppies: PuppyRepository = Depends(get_puppy_repository),
    events: EventRepository = Depends(get_event_repository),
) -> ReproductionService:
    return ReproductionService(dogs, litters, puppies, events, gestation_days=settings.gestation_days)

@router.get("", response_model=List[LitterOut])
async def list_litters(
    status_: Optional[LitterStatus] = Query(None, alias="status"),
    dam_id: Optional[str] = None,
    sire_id: Optional[str] = None,
    limit: int = Query(100, ge=1, le=500),
    current=Depends(get_current_user),
    litters: LitterRepository = Depends(get_litter_repository),
):
    filters = {"status": status_.value if status_ else None, "dam_id": dam_id, "sire_id": sire_id}
    return await litters.find_all(filters, limit=limit, sort_by="mating_date", descending=True)

@router.get("/upcoming-births", response_model=List[LitterOut])
async def upcoming_births(
    days: int = Query(30, ge=1, le=365),
    current=Depends(get_current_user),
    service: ReproductionService = Depends(get_reproduction_service),
):
    """Camadas gestantes o confirmadas con parto previsto en los próximos `days` días."""
    return await service.upcoming_births(days)

@router.post("/heat", response_model=HeatOut, status_code=status.HTTP_201_CREATED)
async def start_heat(
    payload: HeatCreate,
    current=Depends(require_capability("manage_litters")),
    service: ReproductionService = Depends(get_reproduction_service),
):
    return await service.start_heat(
        payload.dam_id,
        payload.heat_date.isoformat() if payload.heat_date else None,
        payload.notes,
    )

@router.get("/dog-history/{dog_id}", response_model=ReproductionHistoryOut)
async def dog_reproduction_history(
    dog_id: str,
    current=Depends(get_current_user),
    service: ReproductionService = Depends(get_reproduction_service),
):
    return await service.dog_history(dog_id)

@router.get("/{litter_id}", response_model=LitterOut)
async def get_litter(
    litter_id: str,
    current=Depends(get_current_user),
    litters: LitterRepository = Depends(get_litter_repository),
):
    litter = await litters.find_by_id(litter_id)
    if not litter:
        raise HTTPException(404, "Camada no encontrada")
    return litter

@router.get("/{litter_id}/puppies", response_model=List[PuppyOut])
async def list_litter_puppies(
    litter_id: str,
    current=Depends(get_current_user),
    litters: LitterRepository = Depends(get_litter_repository),
    puppies: PuppyRepository = Depends(get_puppy_repository),
):
    if not await litters.find_by_id(litter_id):
        raise HTTPException(404, "Camada no encontrada")
    return await puppies.find_all({"litter_id": litter_id}, sort_by="birth_order")

@router.post("/mating", response_model=LitterEventOut, status_code=status.HTTP_201_CREATED)
async def record_mating(
    payload: MatingCreate,
    current=Depends(require_capability("manage_litters")),
    service: ReproductionService = Depends(get_reproduction_service),
):
    """Registra una monta y crea la camada con la fecha prevista de parto."""
    return await service.record_mating(
        payload.dam_id,
        payload.sire_id,
        payload.mating_date.isoformat(),
        mating_type=payload.mating_type,
        heat_start_date=payload.heat_start_date.isoformat() if payload.heat_start_date else None,
        notes=payload.notes,
    )

@router.post("/{litter_id}/pregnancy", response_model=LitterEventOut)
async def confirm_pregnancy(
    litter_id: str,
    payload: PregnancyConfirm,
    current=Depends(require_capability("manage_litters")),
    service: ReproductionService = Depends(get_reproduction_service),
):
    return await service.confirm_pregnancy(
        litter_id, payload.confirmation_date.isoformat(), payload.method, payload.notes
    )

@router.post("/{litter_id}/birth", response_model=BirthOut)
async def record_birth(
    litter_id: str,
    payload: BirthCreate,
    current=Depends(require_capability("manage_litters")),
    service: ReproductionService = Depends(get_reproduction_service),
):
    return await service.record_birth(
        litter_id,
        payload.birth_date.isoformat(),
        birth_type=payload.birth_type,
        puppies=[p.model_dump(mode="json") for p in payload.puppies],
        notes=payload.notes,
    )

@router.get("/{litter_id}/timeline", response_model=List[EventOut])
async def litter_timeline(
    litter_id: str,
    current=Depends(get_current_user),
    service: ReproductionService = Depends(get_reproduction_service),
):
    return await service.litter_timeline(litter_id)

@router.post("/{litter_id}/cancel", response_model=LitterEventOut)
async def cancel_litter(
    litter_id: str,
    payload: LitterCancel,
    current=Depends(require_capability("manage_litters")),
    service: ReproductionService = Depends(get_reproduction_service),
):
    return await service.cancel_litter(litter_id, payload.reason)

# app/routers/public.py
# Escaparate público (sin autenticación): cachorros disponibles y formulario de interés.
from fastapi import APIRouter, Depends, HTTPException, status, Request, Query
from typing import Any, Dict, List, Optional
import logging

from ..repositories import (
    DogRepository, LitterRepository, PuppyRepository, InterestRepository,
    get_dog_repository, get_litter_repository, get_puppy_repository, get_interest_repository,
)
from ..middleware.rate_limit import apply_rate_limit
from ..schemas.public import PublicPuppyOut, InterestCreate, InterestOut

logger = logging.getLogger(__name__)

router = APIRouter()

PUBLIC_STATUSES = ("available", "reserved")

def _public_parent(dog: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not dog:
        return None
    return {
        "id": dog["id"],
        "name": dog.get("name") or "",
        "breed": dog.get("breed"),
        "color": dog.get("color"),
        "photo_main_url": dog.get("photo_main_url"),
    }

async def _to_public(
    puppy: Dict[str, Any],
    litters: LitterRepository,
    dogs: DogRepository,
    cache: Dict[str, Any],
    include_parents: bool = False,
) -> Dict[str, Any]:
    """Solo expone campos públicos; raza y fecha de nacimiento salen de la camada y la madre."""
    litter_id = puppy.get("litter_id")
    if litter_id not in cache:
        cache[litter_id] = await litters.find_by_id(litter_id)
    litter = cache[litter_id] or {}

    dam = await dogs.find_by_id(litter.get("dam_id")) if litter else None
    out = {
        "id": puppy["id"],
        "identifier": puppy.get("identifier") or "",
        "name": puppy.get("name") or puppy.get("identifier") or "",
        "sex": puppy.get("sex") or "",
        "color": puppy.get("color"),
        "status": puppy.get("status") or "available",
        "photo_url": puppy.get("photo_main_url"),
        "birth_date": litter.get("actual_birth_date"),
        "breed": (dam or {}).get("breed"),
        "price": puppy.get("price"),
    }
    if include_parents:
        sire = await dogs.find_by_id(litter.get("sire_id")) if litter else None
        out["sire"] = _public_parent(sire)
        out["dam"] = _public_parent(dam)
    return out

@router.get("/puppies", response_model=List[PublicPuppyOut])
async def list_available_puppies(
    sex: Optional[str] = Query(None, pattern="^(male|female)$"),
    limit: int = Query(100, ge=1, le=200),
    puppies: PuppyRepository = Depends(get_puppy_repository),
    litters: LitterRepository = Depends(get_litter_repository),
    dogs: DogRepository = Depends(get_dog_repository),
):
    docs = await puppies.find_all({"status": "available", "sex": sex}, limit=limit, sort_by="birth_order")
    cache: Dict[str, Any] = {}
    return [await _to_public(p, litters, dogs, cache) for p in docs]

@router.get("/puppies/{puppy_id}", response_model=PublicPuppyOut)
async def get_public_puppy(
    puppy_id: str,
    puppies: PuppyRepository = Depends(get_puppy_repository),
    litters: LitterRepository = Depends(get_litter_repository),
    dogs: DogRepository = Depends(get_dog_repository),
):
    puppy = await puppies.find_by_id(puppy_id)
    if not puppy or puppy.get("status") not in PUBLIC_STATUSES:
        raise HTTPException(404, "Cachorro no encontrado")
    return await _to_public(puppy, litters, dogs, {}, include_parents=True)

@router.post("/interest", response_model=InterestOut, status_code=status.HTTP_201_CREATED)
async def submit_interest(
    request: Request,
    payload: InterestCreate,
    puppies: PuppyRepository = Depends(get_puppy_repository),
    interests: InterestRepository = Depends(get_interest_repository),
):
    # Rate limiting: máximo 5 envíos por minuto por IP
    apply_rate_limit(request, "5/minute")

    doc = payload.model_dump(mode="json")
    if payload.puppy_id:
        puppy = await puppies.find_by_id(payload.puppy_id)
        if not puppy:
            raise HTTPException(404, "Cachorro no encontrado")
        doc["puppy_name"] = payload.puppy_name or puppy.get("name") or puppy.get("identifier")

    interest_id = await interests.insert(doc)
    logger.info("Nuevo interés recibido %s (cachorro %s)", interest_id, payload.puppy_id)
    return {"id": interest_id, "message": "¡Gracias! Nos pondremos en contacto pronto."}

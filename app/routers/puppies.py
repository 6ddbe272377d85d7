# app/routers/puppies.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from ..repositories import PersonRepository, PuppyRepository, get_person_repository, get_puppy_repository
from ..security import get_current_user, require_capability
from ..schemas.puppy import PuppyOut, PuppyPatch, PuppyStatus

router = APIRouter()

@router.get("", response_model=List[PuppyOut])
async def list_puppies(
    status_: Optional[PuppyStatus] = Query(None, alias="status"),
    litter_id: Optional[str] = None,
    buyer_id: Optional[str] = None,
    limit: int = Query(200, ge=1, le=500),
    current=Depends(get_current_user),
    puppies: PuppyRepository = Depends(get_puppy_repository),
):
    filters = {"status": status_.value if status_ else None, "litter_id": litter_id, "buyer_id": buyer_id}
    return await puppies.find_all(filters, limit=limit, sort_by="birth_order")

@router.get("/{puppy_id}", response_model=PuppyOut)
async def get_puppy(
    puppy_id: str,
    current=Depends(get_current_user),
    puppies: PuppyRepository = Depends(get_puppy_repository),
):
    puppy = await puppies.find_by_id(puppy_id)
    if not puppy:
        raise HTTPException(404, "Cachorro no encontrado")
    return puppy

@router.patch("/{puppy_id}", response_model=PuppyOut)
async def update_puppy(
    puppy_id: str,
    payload: PuppyPatch,
    current=Depends(require_capability("manage_puppies")),
    puppies: PuppyRepository = Depends(get_puppy_repository),
    people: PersonRepository = Depends(get_person_repository),
):
    puppy = await puppies.find_by_id(puppy_id)
    if not puppy:
        raise HTTPException(404, "Cachorro no encontrado")

    updates = payload.model_dump(mode="json", exclude_unset=True)
    # buyer_id apunta a people
    if updates.get("buyer_id") and not await people.find_by_id(updates["buyer_id"]):
        raise HTTPException(400, "buyer_id: comprador no encontrado")
    if updates:
        await puppies.update(puppy_id, updates)
    return await puppies.find_by_id(puppy_id)

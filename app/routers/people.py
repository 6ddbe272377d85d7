from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional
import logging

from ..repositories import PersonRepository, get_person_repository
from ..security import require_capability
from ..schemas.person import PersonCreate, PersonUpdate, PersonOut, PersonOption, PersonType

logger = logging.getLogger(__name__)

router = APIRouter()

# Todo el módulo de personas exige manage_people, también la lectura
can_manage = require_capability("manage_people")

BUYER_TYPES = [PersonType.buyer.value, PersonType.interested.value]

async def _check_person_refs(
    people: PersonRepository,
    email: Optional[str],
    referred_by_id: Optional[str],
    person_id: Optional[str] = None,
) -> None:
    if email:
        same = await people.find_all({"email": email}, limit=1)
        if same and same[0]["id"] != person_id:
            raise HTTPException(400, "Ya existe una persona con ese email")
    if referred_by_id:
        if referred_by_id == person_id or not await people.find_by_id(referred_by_id):
            raise HTTPException(400, "referred_by_id: persona no encontrada")

@router.get("", response_model=List[PersonOut])
async def list_people(
    type: Optional[PersonType] = None,
    search: Optional[str] = Query(None, max_length=100),
    limit: int = Query(100, ge=1, le=500),
    current=Depends(can_manage),
    people: PersonRepository = Depends(get_person_repository),
):
    filters = {"type": type.value if type else None, "search": search}
    return await people.find_all(filters, limit=limit, sort_by="name")

@router.get("/dropdown", response_model=List[PersonOption])
async def people_dropdown(
    type: Optional[PersonType] = None,
    current=Depends(can_manage),
    people: PersonRepository = Depends(get_person_repository),
):
    return await people.find_all({"type": type.value if type else None}, limit=1000, sort_by="name")

@router.get("/veterinarians", response_model=List[PersonOut])
async def list_veterinarians(
    current=Depends(can_manage),
    people: PersonRepository = Depends(get_person_repository),
):
    return await people.find_all({"type": PersonType.veterinarian.value}, limit=1000, sort_by="name")

@router.get("/buyers", response_model=List[PersonOut])
async def list_buyers(
    current=Depends(can_manage),
    people: PersonRepository = Depends(get_person_repository),
):
    """Compradores y también los interesados (compradores potenciales)."""
    return await people.find_all({"type": {"$in": BUYER_TYPES}}, limit=1000, sort_by="name")

@router.get("/{person_id}", response_model=PersonOut)
async def get_person(
    person_id: str,
    current=Depends(can_manage),
    people: PersonRepository = Depends(get_person_repository),
):
    person = await people.find_by_id(person_id)
    if not person:
        raise HTTPException(status_code=404, detail="Persona no encontrada")
    return person

@router.post("", response_model=PersonOut, status_code=status.HTTP_201_CREATED)
async def create_person(
    payload: PersonCreate,
    current=Depends(can_manage),
    people: PersonRepository = Depends(get_person_repository),
):
    doc = payload.model_dump(mode="json")
    if doc.get("email"):
        doc["email"] = doc["email"].lower()
    await _check_person_refs(people, doc.get("email"), doc.get("referred_by_id"))
    doc["created_by"] = current["id"]
    person_id = await people.insert(doc)
    logger.info("Persona creada: %s (%s)", person_id, payload.type.value)
    return await people.find_by_id(person_id)

@router.patch("/{person_id}", response_model=PersonOut)
async def update_person(
    person_id: str,
    payload: PersonUpdate,
    current=Depends(can_manage),
    people: PersonRepository = Depends(get_person_repository),
):
    if not await people.find_by_id(person_id):
        raise HTTPException(status_code=404, detail="Persona no encontrada")

    updates = payload.model_dump(mode="json", exclude_unset=True)
    if updates.get("email"):
        updates["email"] = updates["email"].lower()
    await _check_person_refs(people, updates.get("email"), updates.get("referred_by_id"), person_id)
    if updates:
        await people.update(person_id, updates)
    return await people.find_by_id(person_id)

@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_person(
    person_id: str,
    current=Depends(can_manage),
    people: PersonRepository = Depends(get_person_repository),
):
    if not await people.delete(person_id):
        raise HTTPException(status_code=404, detail="Persona no encontrada")
    return None

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Query
from uuid import uuid4
from pathlib import Path
from typing import List, Optional
import logging

from ..config import get_settings
from ..dates import format_age
from ..repositories import DogRepository, get_dog_repository
from ..security import get_current_user, require_capability
from ..schemas.dog import DogCreate, DogUpdate, DogOut, DogStatus, Sex

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()

def to_out(doc: dict) -> dict:
    doc = dict(doc)
    doc.setdefault("titles", [])
    doc.setdefault("health_tests", [])
    if doc.get("birth_date"):
        doc["age"] = format_age(doc["birth_date"], doc.get("death_date"))
    return doc

async def _check_parents(
    dogs: DogRepository,
    sire_id: Optional[str],
    dam_id: Optional[str],
    dog_id: Optional[str] = None,
) -> None:
    """El padre debe existir y ser macho; la madre, existir y ser hembra."""
    for field, parent_id, sex in (("sire_id", sire_id, "male"), ("dam_id", dam_id, "female")):
        if not parent_id:
            continue
        if dog_id and parent_id == dog_id:
            raise HTTPException(400, f"{field}: un perro no puede ser su propio progenitor")
        parent = await dogs.find_by_id(parent_id)
        if not parent:
            raise HTTPException(400, f"{field}: progenitor no encontrado")
        if parent.get("sex") != sex:
            raise HTTPException(
                400, f"{field}: el padre debe ser macho" if sex == "male" else f"{field}: la madre debe ser hembra"
            )

@router.get("", response_model=List[DogOut])
async def list_dogs(
    status_: Optional[DogStatus] = Query(None, alias="status"),
    sex: Optional[Sex] = None,
    breed: Optional[str] = None,
    search: Optional[str] = Query(None, max_length=100),
    limit: int = Query(100, ge=1, le=500),
    current=Depends(get_current_user),
    dogs: DogRepository = Depends(get_dog_repository),
):
    filters = {
        "status": status_.value if status_ else None,
        "sex": sex,
        "breed": breed,
        "search": search,
    }
    docs = await dogs.find_all(filters, limit=limit, sort_by="name")
    return [to_out(d) for d in docs]

@router.get("/{dog_id}", response_model=DogOut)
async def get_dog(
    dog_id: str,
    current=Depends(get_current_user),
    dogs: DogRepository = Depends(get_dog_repository),
):
    dog = await dogs.find_by_id(dog_id)
    if not dog:
        raise HTTPException(status_code=404, detail="Perro no encontrado")
    return to_out(dog)

@router.post("", response_model=DogOut, status_code=status.HTTP_201_CREATED)
async def create_dog(
    payload: DogCreate,
    current=Depends(require_capability("manage_dogs")),
    dogs: DogRepository = Depends(get_dog_repository),
):
    await _check_parents(dogs, payload.sire_id, payload.dam_id)
    doc = payload.model_dump(mode="json")
    doc["created_by"] = current["id"]
    dog_id = await dogs.insert(doc)
    logger.info("Perro creado: %s (%s)", dog_id, payload.name)
    return to_out(await dogs.find_by_id(dog_id))

@router.patch("/{dog_id}", response_model=DogOut)
async def update_dog(
    dog_id: str,
    payload: DogUpdate,
    current=Depends(require_capability("manage_dogs")),
    dogs: DogRepository = Depends(get_dog_repository),
):
    dog = await dogs.find_by_id(dog_id)
    if not dog:
        raise HTTPException(status_code=404, detail="Perro no encontrado")

    updates = payload.model_dump(mode="json", exclude_unset=True)
    await _check_parents(dogs, updates.get("sire_id"), updates.get("dam_id"), dog_id=dog_id)
    if updates:
        await dogs.update(dog_id, updates)
    return to_out(await dogs.find_by_id(dog_id))

@router.delete("/{dog_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_dog(
    dog_id: str,
    current=Depends(require_capability("manage_dogs")),
    dogs: DogRepository = Depends(get_dog_repository),
):
    if not await dogs.delete(dog_id):
        raise HTTPException(status_code=404, detail="Perro no encontrado")
    return None

@router.post("/{dog_id}/photo", response_model=DogOut)
async def upload_dog_photo(
    dog_id: str,
    file: UploadFile = File(...),
    current=Depends(require_capability("manage_dogs")),
    dogs: DogRepository = Depends(get_dog_repository),
):
    dog = await dogs.find_by_id(dog_id)
    if not dog:
        raise HTTPException(status_code=404, detail="Perro no encontrado")

    # valida tipo básico
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=415, detail="Solo imágenes")

    ext = Path(file.filename or "").suffix.lower() or ".jpg"
    filename = f"{uuid4().hex}{ext}"
    rel_path = Path("dogs") / filename
    abs_path = Path(settings.media_dir) / rel_path
    abs_path.parent.mkdir(parents=True, exist_ok=True)

    # guarda async
    import aiofiles
    async with aiofiles.open(abs_path, "wb") as out:
        while chunk := await file.read(1024 * 1024):
            await out.write(chunk)

    url = f"/media/{rel_path.as_posix()}"
    await dogs.update(dog_id, {"photo_main_url": url})
    return to_out(await dogs.find_by_id(dog_id))

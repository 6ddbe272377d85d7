# app/routers/pedigree.py
from fastapi import APIRouter, Depends, Query
from typing import List

from ..config import get_settings
from ..repositories import DogRepository, get_dog_repository
from ..security import get_current_user
from ..services.pedigree import PedigreeResolver
from ..schemas.dog import DogOut
from ..schemas.pedigree import PedigreeOut, PedigreeFlatOut
from .dogs import to_out

router = APIRouter()
settings = get_settings()

async def get_pedigree_resolver(
    dogs: DogRepository = Depends(get_dog_repository),
) -> PedigreeResolver:
    return PedigreeResolver(dogs, max_generations=settings.pedigree_max_generations)

@router.get("/{dog_id}", response_model=PedigreeOut)
async def get_pedigree(
    dog_id: str,
    generations: int = Query(3, ge=1, le=settings.pedigree_max_generations),
    current=Depends(get_current_user),
    resolver: PedigreeResolver = Depends(get_pedigree_resolver),
):
    """
    Árbol de ancestros hasta `generations` niveles.
    404 si el perro no existe (NotFoundError -> handler en main).
    """
    tree = await resolver.resolve(dog_id, generations)
    return {**tree, "generations": resolver.clamp_generations(generations)}

@router.get("/{dog_id}/flat", response_model=PedigreeFlatOut)
async def get_pedigree_flat(
    dog_id: str,
    generations: int = Query(3, ge=1, le=settings.pedigree_max_generations),
    current=Depends(get_current_user),
    resolver: PedigreeResolver = Depends(get_pedigree_resolver),
):
    return await resolver.resolve_flat(dog_id, generations)

@router.get("/{dog_id}/offspring", response_model=List[DogOut])
async def get_offspring(
    dog_id: str,
    current=Depends(get_current_user),
    resolver: PedigreeResolver = Depends(get_pedigree_resolver),
):
    return [to_out(d) for d in await resolver.offspring(dog_id)]

@router.get("/{dog_id}/siblings", response_model=List[DogOut])
async def get_siblings(
    dog_id: str,
    full: bool = True,
    current=Depends(get_current_user),
    resolver: PedigreeResolver = Depends(get_pedigree_resolver),
):
    return [to_out(d) for d in await resolver.siblings(dog_id, full_siblings=full)]

from pydantic import BaseModel
from typing import Optional, List, Dict, Any

class DogSummary(BaseModel):
    id: Optional[str] = None    # None = ancestro desconocido
    name: str
    call_name: Optional[str] = None
    registration_number: Optional[str] = None
    breed: Optional[str] = None
    color: Optional[str] = None
    sex: Optional[str] = None
    birth_date: Optional[str] = None
    photo_main_url: Optional[str] = None
    titles: List[Dict[str, Any]] = []

class PedigreeNode(BaseModel):
    dog: DogSummary
    pedigree: Optional["PedigreeBranches"] = None

class PedigreeBranches(BaseModel):
    sire: Optional[PedigreeNode] = None
    dam: Optional[PedigreeNode] = None

PedigreeNode.model_rebuild()

class PedigreeOut(PedigreeNode):
    generations: int

class AncestorOut(DogSummary):
    generation: int
    position: str
    role: str

class PedigreeFlatOut(BaseModel):
    dog: DogSummary
    ancestors: List[AncestorOut]
    generation_labels: Dict[str, str]

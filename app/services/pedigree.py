# app/services/pedigree.py
"""
Árbol genealógico (pedigrí) de un perro.

Los perros viven en una única colección y los padres se referencian por id
(`sire_id` / `dam_id`); el árbol se construye resolviendo esas referencias
bajo demanda, nunca copiando documentos.

La profundidad máxima es la única protección frente a datos cíclicos (un
perro que es su propio ancestro): la recursión se corta siempre en
`max_generations`, así que con el tope de 5 hay como mucho 62 búsquedas.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..exceptions import NotFoundError

logger = logging.getLogger(__name__)

MAX_GENERATIONS = 5
UNKNOWN_NAME = "Desconocido"

GENERATION_LABELS = {
    1: "Padres",
    2: "Abuelos",
    3: "Bisabuelos",
    4: "Tatarabuelos",
    5: "Trastatarabuelos",
}
_MALE_ROLES = {1: "Padre", 2: "Abuelo", 3: "Bisabuelo", 4: "Tatarabuelo", 5: "Trastatarabuelo"}
_FEMALE_ROLES = {1: "Madre", 2: "Abuela", 3: "Bisabuela", 4: "Tatarabuela", 5: "Trastatarabuela"}


def summarize(dog: Dict[str, Any]) -> Dict[str, Any]:
    """Proyección del perro que se muestra en cada nodo del árbol."""
    return {
        "id": dog.get("id"),
        "name": dog.get("name") or "",
        "call_name": dog.get("call_name"),
        "registration_number": dog.get("registration_number"),
        "breed": dog.get("breed"),
        "color": dog.get("color"),
        "sex": dog.get("sex"),
        "birth_date": dog.get("birth_date"),
        "photo_main_url": dog.get("photo_main_url"),
        "titles": list(dog.get("titles") or []),
    }


def unknown_ancestor(sex: str) -> Dict[str, Any]:
    return {
        "id": None,
        "name": UNKNOWN_NAME,
        "call_name": None,
        "registration_number": None,
        "breed": None,
        "color": None,
        "sex": sex,
        "birth_date": None,
        "photo_main_url": None,
        "titles": [],
    }


def ancestor_role(generation: int, sex: str) -> str:
    roles = _MALE_ROLES if sex == "male" else _FEMALE_ROLES
    return roles.get(generation, "Ancestro")


def flatten(node: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Aplana el árbol en una lista de ancestros con su posición
    (S, D, SS, SD, DS, DD, ...), ordenada por generación.
    """
    ancestors: List[Dict[str, Any]] = []

    def walk(pedigree: Optional[Dict[str, Any]], generation: int, position: str) -> None:
        if not pedigree:
            return
        for branch, code, sex in (("sire", "S", "male"), ("dam", "D", "female")):
            child = pedigree.get(branch)
            if not child:
                continue
            pos = position + code
            ancestors.append({
                **child["dog"],
                "generation": generation,
                "position": pos,
                "role": ancestor_role(generation, sex),
            })
            walk(child.get("pedigree"), generation + 1, pos)

    walk(node.get("pedigree"), 1, "")
    return sorted(ancestors, key=lambda a: a["generation"])


class PedigreeResolver:
    """
    `dogs` es cualquier objeto con `find_by_id(id)` y
    `find_all(filters, limit, sort_by, descending)` asíncronos
    (DogRepository en producción).
    """

    def __init__(self, dogs, max_generations: int = MAX_GENERATIONS):
        self.dogs = dogs
        self.max_generations = max_generations

    def clamp_generations(self, generations: int) -> int:
        return max(1, min(int(generations), self.max_generations))

    async def _get_dog(self, dog_id: str) -> Dict[str, Any]:
        dog = await self.dogs.find_by_id(dog_id)
        if not dog:
            raise NotFoundError("Perro no encontrado")
        return dog

    async def resolve(self, dog_id: str, max_generations: int = 3) -> Dict[str, Any]:
        """
        Devuelve `{dog, pedigree}`; `pedigree` es `{sire, dam}` para los nodos
        expandidos y None en los que quedan en el límite de profundidad.
        Solo falla (NotFoundError) si el perro raíz no existe.
        """
        generations = self.clamp_generations(max_generations)
        dog = await self._get_dog(dog_id)
        return await self._build_node(dog, 0, generations)

    async def _build_node(self, dog: Dict[str, Any], depth: int, max_depth: int) -> Dict[str, Any]:
        node: Dict[str, Any] = {"dog": summarize(dog), "pedigree": None}
        if depth >= max_depth:
            return node

        # Si falla una rama se cancela la otra; si se cancela la tarea que
        # llama, gather cancela las dos
        branches = [
            asyncio.ensure_future(self._build_parent(dog.get("sire_id"), "male", depth + 1, max_depth)),
            asyncio.ensure_future(self._build_parent(dog.get("dam_id"), "female", depth + 1, max_depth)),
        ]
        try:
            sire, dam = await asyncio.gather(*branches)
        except BaseException:
            for branch in branches:
                branch.cancel()
            await asyncio.gather(*branches, return_exceptions=True)
            raise
        node["pedigree"] = {"sire": sire, "dam": dam}
        return node

    async def _build_parent(
        self, parent_id: Optional[str], sex: str, depth: int, max_depth: int
    ) -> Optional[Dict[str, Any]]:
        if not parent_id:
            return None
        parent = await self.dogs.find_by_id(parent_id)
        if not parent:
            logger.warning("Ancestro %s no encontrado; se muestra como desconocido", parent_id)
            return {"dog": unknown_ancestor(sex), "pedigree": None}
        return await self._build_node(parent, depth, max_depth)

    async def resolve_flat(self, dog_id: str, max_generations: int = 3) -> Dict[str, Any]:
        tree = await self.resolve(dog_id, max_generations)
        return {
            "dog": tree["dog"],
            "ancestors": flatten(tree),
            "generation_labels": {str(k): v for k, v in GENERATION_LABELS.items()},
        }

    async def offspring(self, dog_id: str) -> List[Dict[str, Any]]:
        dog = await self._get_dog(dog_id)
        field = "sire_id" if dog.get("sex") == "male" else "dam_id"
        return await self.dogs.find_all(
            {field: dog["id"]}, limit=100, sort_by="birth_date", descending=True
        )

    async def siblings(self, dog_id: str, full_siblings: bool = True) -> List[Dict[str, Any]]:
        """
        Hermanos completos (mismo padre y misma madre) o, con
        full_siblings=False, también medio hermanos por cualquiera de los dos.
        """
        dog = await self._get_dog(dog_id)
        sire_id, dam_id = dog.get("sire_id"), dog.get("dam_id")
        found: Dict[str, Dict[str, Any]] = {}

        if sire_id:
            for child in await self.dogs.find_all({"sire_id": sire_id}, limit=100):
                if child["id"] == dog["id"]:
                    continue
                if full_siblings and (not dam_id or child.get("dam_id") != dam_id):
                    continue
                found[child["id"]] = child

        if not full_siblings and dam_id:
            for child in await self.dogs.find_all({"dam_id": dam_id}, limit=100):
                if child["id"] != dog["id"]:
                    found[child["id"]] = child

        return list(found.values())

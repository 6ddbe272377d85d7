"""
Tests del árbol genealógico
"""
import asyncio
import pytest

from app.exceptions import NotFoundError
from app.services.pedigree import PedigreeResolver, UNKNOWN_NAME, flatten
from conftest import InMemoryRepository, add_dog


def depth_of(node, depth=0):
    """Profundidad del nodo expandido más profundo."""
    pedigree = node.get("pedigree")
    if not pedigree:
        return depth
    children = [c for c in (pedigree["sire"], pedigree["dam"]) if c]
    if not children:
        return depth + 1
    return max(depth_of(c, depth + 1) for c in children)

@pytest.fixture
def family(dogs_repo):
    """Tres generaciones: Luna (hija) <- Rex x Bella <- abuelos."""
    gs = add_dog(dogs_repo, "Abuelo Paterno", "male")
    gd = add_dog(dogs_repo, "Abuela Paterna", "female")
    mgs = add_dog(dogs_repo, "Abuelo Materno", "male")
    sire = add_dog(dogs_repo, "Rex", "male", sire_id=gs, dam_id=gd,
                   registration_number="CBKC-001", titles=[{"title": "CH"}])
    dam = add_dog(dogs_repo, "Bella", "female", sire_id=mgs)
    luna = add_dog(dogs_repo, "Luna", "female", sire_id=sire, dam_id=dam)
    return {"luna": luna, "rex": sire, "bella": dam, "gs": gs, "gd": gd, "mgs": mgs}


@pytest.mark.asyncio
async def test_dog_without_ancestors(dogs_repo):
    dog_id = add_dog(dogs_repo, "Solo", "male")
    resolver = PedigreeResolver(dogs_repo)

    for generations in (1, 3, 5):
        tree = await resolver.resolve(dog_id, generations)
        assert tree["dog"]["id"] == dog_id
        assert tree["pedigree"] == {"sire": None, "dam": None}

@pytest.mark.asyncio
async def test_resolve_builds_tree(dogs_repo, family):
    tree = await PedigreeResolver(dogs_repo).resolve(family["luna"], 3)

    sire = tree["pedigree"]["sire"]
    dam = tree["pedigree"]["dam"]
    assert sire["dog"]["name"] == "Rex"
    assert sire["dog"]["registration_number"] == "CBKC-001"
    assert sire["dog"]["titles"] == [{"title": "CH"}]
    assert dam["dog"]["name"] == "Bella"
    assert sire["pedigree"]["sire"]["dog"]["name"] == "Abuelo Paterno"
    assert sire["pedigree"]["dam"]["dog"]["name"] == "Abuela Paterna"
    assert dam["pedigree"]["sire"]["dog"]["name"] == "Abuelo Materno"
    assert dam["pedigree"]["dam"] is None

@pytest.mark.asyncio
async def test_one_generation_only_expands_parents(dogs_repo, family):
    tree = await PedigreeResolver(dogs_repo).resolve(family["luna"], 1)
    assert tree["pedigree"]["sire"]["dog"]["name"] == "Rex"
    assert tree["pedigree"]["sire"]["pedigree"] is None
    assert tree["pedigree"]["dam"]["pedigree"] is None

@pytest.mark.asyncio
async def test_depth_bound_on_long_chain(dogs_repo):
    # cadena de 10 generaciones por línea paterna
    parent = None
    for i in range(10):
        parent = add_dog(dogs_repo, f"Gen {i}", "male", sire_id=parent)
    resolver = PedigreeResolver(dogs_repo)

    tree = await resolver.resolve(parent, 3)

    assert depth_of(tree) == 3
    node = tree
    for _ in range(3):
        node = node["pedigree"]["sire"]
    assert node["dog"]["name"] == "Gen 6"
    assert node["pedigree"] is None

@pytest.mark.asyncio
async def test_generations_are_clamped(dogs_repo):
    parent = None
    for i in range(10):
        parent = add_dog(dogs_repo, f"Gen {i}", "male", sire_id=parent)
    resolver = PedigreeResolver(dogs_repo, max_generations=5)

    assert depth_of(await resolver.resolve(parent, 50)) == 5
    assert depth_of(await resolver.resolve(parent, 0)) == 1
    assert resolver.clamp_generations(9) == 5

@pytest.mark.asyncio
async def test_missing_root_raises_not_found(dogs_repo):
    with pytest.raises(NotFoundError):
        await PedigreeResolver(dogs_repo).resolve("507f1f77bcf86cd799439011", 3)

@pytest.mark.asyncio
async def test_dangling_parent_is_unknown_leaf(dogs_repo):
    dog_id = add_dog(dogs_repo, "Huérfano", "male", sire_id="507f1f77bcf86cd799439011")

    tree = await PedigreeResolver(dogs_repo).resolve(dog_id, 3)

    sire = tree["pedigree"]["sire"]
    assert sire["dog"]["id"] is None
    assert sire["dog"]["name"] == UNKNOWN_NAME
    assert sire["dog"]["sex"] == "male"
    assert sire["pedigree"] is None
    assert tree["pedigree"]["dam"] is None

@pytest.mark.asyncio
async def test_cycle_terminates_within_bound(dogs_repo):
    dog_id = add_dog(dogs_repo, "Ouroboros", "male")
    dogs_repo.docs[dog_id]["sire_id"] = dog_id
    dogs_repo.docs[dog_id]["dam_id"] = dog_id

    tree = await asyncio.wait_for(PedigreeResolver(dogs_repo).resolve(dog_id, 5), timeout=5)

    assert depth_of(tree) == 5
    # raíz + 2 + 4 + 8 + 16 + 32 búsquedas
    assert dogs_repo.lookups == 63

@pytest.mark.asyncio
async def test_cancellation_stops_outstanding_lookups():
    cancelled = []

    class SlowDogs(InMemoryRepository):
        async def find_by_id(self, id):
            if id == "root":
                return {"id": "root", "name": "Root", "sire_id": "s", "dam_id": "d"}
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                cancelled.append(id)
                raise
            return None

    task = asyncio.create_task(PedigreeResolver(SlowDogs()).resolve("root", 5))
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert sorted(cancelled) == ["d", "s"]

@pytest.mark.asyncio
async def test_flatten_positions_and_roles(dogs_repo, family):
    resolver = PedigreeResolver(dogs_repo)
    flat = await resolver.resolve_flat(family["luna"], 3)

    by_pos = {a["position"]: a for a in flat["ancestors"]}
    assert set(by_pos) == {"S", "D", "SS", "SD", "DS"}
    assert by_pos["S"]["role"] == "Padre"
    assert by_pos["D"]["role"] == "Madre"
    assert by_pos["SS"]["role"] == "Abuelo"
    assert by_pos["SD"]["role"] == "Abuela"
    assert by_pos["SD"]["generation"] == 2
    assert [a["generation"] for a in flat["ancestors"]] == [1, 1, 2, 2, 2]
    assert flat["generation_labels"]["1"] == "Padres"

def test_flatten_empty_tree():
    assert flatten({"dog": {}, "pedigree": {"sire": None, "dam": None}}) == []
    assert flatten({"dog": {}, "pedigree": None}) == []

@pytest.mark.asyncio
async def test_offspring_uses_parent_role(dogs_repo):
    rex = add_dog(dogs_repo, "Rex", "male")
    bella = add_dog(dogs_repo, "Bella", "female")
    add_dog(dogs_repo, "Cachorro Viejo", "male", sire_id=rex, dam_id=bella, birth_date="2019-01-01")
    add_dog(dogs_repo, "Cachorro Nuevo", "female", sire_id=rex, birth_date="2023-01-01")
    resolver = PedigreeResolver(dogs_repo)

    assert [d["name"] for d in await resolver.offspring(rex)] == ["Cachorro Nuevo", "Cachorro Viejo"]
    assert [d["name"] for d in await resolver.offspring(bella)] == ["Cachorro Viejo"]

@pytest.mark.asyncio
async def test_siblings_full_and_half(dogs_repo):
    rex = add_dog(dogs_repo, "Rex", "male")
    bella = add_dog(dogs_repo, "Bella", "female")
    kira = add_dog(dogs_repo, "Kira", "female")
    luna = add_dog(dogs_repo, "Luna", "female", sire_id=rex, dam_id=bella)
    add_dog(dogs_repo, "Toby", "male", sire_id=rex, dam_id=bella)
    add_dog(dogs_repo, "Medio Paterno", "male", sire_id=rex, dam_id=kira)
    add_dog(dogs_repo, "Medio Materno", "male", dam_id=bella)
    resolver = PedigreeResolver(dogs_repo)

    full = await resolver.siblings(luna)
    assert [d["name"] for d in full] == ["Toby"]

    half = await resolver.siblings(luna, full_siblings=False)
    assert sorted(d["name"] for d in half) == ["Medio Materno", "Medio Paterno", "Toby"]

@pytest.mark.asyncio
async def test_siblings_of_missing_dog(dogs_repo):
    with pytest.raises(NotFoundError):
        await PedigreeResolver(dogs_repo).siblings("nope")

@pytest.mark.asyncio
async def test_failing_branch_cancels_sibling():
    cancelled = []

    class BrokenDogs(InMemoryRepository):
        async def find_by_id(self, id):
            if id == "root":
                return {"id": "root", "name": "Root", "sire_id": "s", "dam_id": "d"}
            if id == "s":
                await asyncio.sleep(0)
                raise RuntimeError("conexión perdida")
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                cancelled.append(id)
                raise
            return None

    with pytest.raises(RuntimeError):
        await asyncio.wait_for(PedigreeResolver(BrokenDogs()).resolve("root", 5), timeout=5)
    assert cancelled == ["d"]

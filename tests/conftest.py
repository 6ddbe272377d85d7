"""
Configuración de pytest para tests

Los repositorios de Mongo se sustituyen por implementaciones en memoria vía
app.dependency_overrides, así que no hace falta un servidor de MongoDB.
"""
import os

# Sin migraciones automáticas al importar la app
os.environ.setdefault("AUTO_MIGRATE", "false")

import pytest
from datetime import datetime, timedelta
from bson import ObjectId
from httpx import AsyncClient, ASGITransport


class InMemoryRepository:
    """Mismo contrato que MongoRepository, guardando dicts en memoria."""

    def __init__(self):
        self.docs = {}
        self.lookups = 0

    def add(self, **fields) -> str:
        doc_id = fields.pop("id", None) or str(ObjectId())
        self.docs[doc_id] = {**fields, "id": doc_id}
        return doc_id

    def _compare(self, actual, value) -> bool:
        if not isinstance(value, dict):
            return actual == value
        for op, expected in value.items():
            if op == "$in":
                if actual not in expected:
                    return False
            elif op == "$ne":
                if actual == expected:
                    return False
            elif actual is None:
                # como en Mongo, los rangos no casan con campos vacíos
                return False
            elif op == "$gte" and not actual >= expected:
                return False
            elif op == "$lte" and not actual <= expected:
                return False
            elif op == "$lt" and not actual < expected:
                return False
            elif op == "$gt" and not actual > expected:
                return False
        return True

    def _matches(self, doc, filters) -> bool:
        for key, value in filters.items():
            if value is None:
                continue
            if key == "search":
                haystack = " ".join(doc.get(f) or "" for f in ("name", "email")).lower()
                if value.lower() not in haystack:
                    return False
            elif not self._compare(doc.get(key), value):
                return False
        return True

    async def find_by_id(self, id):
        self.lookups += 1
        doc = self.docs.get(str(id)) if id else None
        if not doc or doc.get("deleted_at"):
            return None
        return dict(doc)

    async def find_all(self, filters=None, limit=100, sort_by=None, descending=False):
        items = [
            dict(d) for d in self.docs.values()
            if not d.get("deleted_at") and self._matches(d, filters or {})
        ]
        if sort_by:
            items.sort(key=lambda d: (d.get(sort_by) is None, d.get(sort_by) or ""), reverse=descending)
        return items[:limit]

    async def insert(self, data) -> str:
        return self.add(**data)

    async def update(self, id, data) -> bool:
        doc = self.docs.get(str(id))
        if not doc or doc.get("deleted_at"):
            return False
        doc.update(data)
        return True

    async def delete(self, id) -> bool:
        doc = self.docs.get(str(id))
        if not doc or doc.get("deleted_at"):
            return False
        doc["deleted_at"] = "now"
        return True


class FakeSettingsStore:
    """SettingsStore en memoria; los locks guardan la hora en que se tomaron."""

    def __init__(self, values=None):
        self.values = dict(values or {})
        self.locks = {}
        self.writes = []

    async def get(self, key, default=None):
        return self.values.get(key, default)

    async def set(self, key, value):
        self.writes.append((key, value))
        self.values[key] = value

    async def acquire_lock(self, name, ttl_seconds):
        now = datetime.utcnow()
        locked_at = self.locks.get(name)
        if locked_at is not None and locked_at >= now - timedelta(seconds=ttl_seconds):
            return False
        self.locks[name] = now
        return True

    async def release_lock(self, name):
        self.locks.pop(name, None)


def add_dog(repo: InMemoryRepository, name: str, sex: str = "male", **fields) -> str:
    """Inserta un perro con los campos mínimos."""
    fields.setdefault("breed", "Border Collie")
    fields.setdefault("birth_date", "2020-05-10")
    fields.setdefault("status", "active")
    fields.setdefault("titles", [])
    return repo.add(name=name, sex=sex, **fields)


@pytest.fixture
def dogs_repo():
    return InMemoryRepository()

@pytest.fixture
def litters_repo():
    return InMemoryRepository()

@pytest.fixture
def puppies_repo():
    return InMemoryRepository()

@pytest.fixture
def people_repo():
    return InMemoryRepository()

@pytest.fixture
def events_repo():
    return InMemoryRepository()

@pytest.fixture
def interests_repo():
    return InMemoryRepository()

@pytest.fixture
def settings_store():
    return FakeSettingsStore()

@pytest.fixture
def admin_user():
    from app.security import CAPABILITIES
    return {"id": "user-1", "capabilities": list(CAPABILITIES)}

@pytest.fixture
def app_overrides(dogs_repo, people_repo, litters_repo, puppies_repo, events_repo, interests_repo, settings_store):
    """Aplica los repositorios en memoria sobre la app y los limpia al terminar."""
    from app.main import app
    from app import repositories

    app.state.limiter = None
    app.dependency_overrides[repositories.get_dog_repository] = lambda: dogs_repo
    app.dependency_overrides[repositories.get_person_repository] = lambda: people_repo
    app.dependency_overrides[repositories.get_litter_repository] = lambda: litters_repo
    app.dependency_overrides[repositories.get_puppy_repository] = lambda: puppies_repo
    app.dependency_overrides[repositories.get_event_repository] = lambda: events_repo
    app.dependency_overrides[repositories.get_interest_repository] = lambda: interests_repo
    app.dependency_overrides[repositories.get_settings_store] = lambda: settings_store
    yield app
    app.dependency_overrides.clear()

@pytest.fixture
def auth_app(app_overrides, admin_user):
    """App con un usuario autenticado con todas las capacidades."""
    from app.security import get_current_user
    app_overrides.dependency_overrides[get_current_user] = lambda: admin_user
    return app_overrides

@pytest.fixture
def anon_app(app_overrides):
    """App sin usuario inyectado (la autenticación real sigue activa)."""
    return app_overrides


def http(app) -> AsyncClient:
    transport = ASGITransport(app=app)  # transporte ASGI para FastAPI
    return AsyncClient(transport=transport, base_url="http://test")

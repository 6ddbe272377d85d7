# app/repositories.py
"""
Acceso a colecciones de Mongo.

Los routers y servicios reciben los repositorios como dependencias de FastAPI
(`get_dog_repository`, ...) para poder sustituirlos en los tests.
"""
import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from .db import get_db
from .utils import to_id, to_object_id


class MongoRepository:
    collection: str = ""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.col = db[self.collection]

    def _build_query(self, filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        # deleted_at ausente o null -> registro visible
        query: Dict[str, Any] = {"deleted_at": None}
        for key, value in (filters or {}).items():
            if value is not None:
                query[key] = value
        return query

    async def find_by_id(self, id: Optional[str]) -> Optional[Dict[str, Any]]:
        oid = to_object_id(id)
        if oid is None:
            return None
        doc = await self.col.find_one({"_id": oid, "deleted_at": None})
        return to_id(doc) if doc else None

    async def find_all(
        self,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 100,
        sort_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        cursor = self.col.find(self._build_query(filters))
        if sort_by:
            cursor = cursor.sort(sort_by, -1 if descending else 1)
        docs = await cursor.to_list(limit)
        return [to_id(d) for d in docs]

    async def insert(self, data: Dict[str, Any]) -> str:
        doc = dict(data)
        now = datetime.utcnow()
        doc.setdefault("created_at", now)
        doc["updated_at"] = now
        res = await self.col.insert_one(doc)
        return str(res.inserted_id)

    async def update(self, id: str, data: Dict[str, Any]) -> bool:
        oid = to_object_id(id)
        if oid is None:
            return False
        updates = dict(data)
        updates["updated_at"] = datetime.utcnow()
        res = await self.col.update_one({"_id": oid, "deleted_at": None}, {"$set": updates})
        return res.matched_count > 0

    async def delete(self, id: str) -> bool:
        """Borrado lógico: marca deleted_at."""
        oid = to_object_id(id)
        if oid is None:
            return False
        res = await self.col.update_one(
            {"_id": oid, "deleted_at": None},
            {"$set": {"deleted_at": datetime.utcnow()}},
        )
        return res.modified_count > 0


class DogRepository(MongoRepository):
    collection = "dogs"

    def _build_query(self, filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        filters = dict(filters or {})
        search = filters.pop("search", None)
        query = super()._build_query(filters)
        if search:
            query["name"] = {"$regex": re.escape(search), "$options": "i"}
        return query


class PersonRepository(MongoRepository):
    collection = "people"

    def _build_query(self, filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        filters = dict(filters or {})
        search = filters.pop("search", None)
        query = super()._build_query(filters)
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"name": pattern}, {"email": pattern}]
        return query


class LitterRepository(MongoRepository):
    collection = "litters"


class PuppyRepository(MongoRepository):
    collection = "puppies"


class EventRepository(MongoRepository):
    collection = "events"


class InterestRepository(MongoRepository):
    collection = "interests"


class SettingsStore:
    """
    Almacén clave-valor persistente (colección `options`).
    También guarda los locks consultivos en `locks`.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.options = db["options"]
        self.locks = db["locks"]

    async def get(self, key: str, default: Any = None) -> Any:
        doc = await self.options.find_one({"_id": key})
        if not doc:
            return default
        return doc.get("value", default)

    async def set(self, key: str, value: Any) -> None:
        await self.options.update_one(
            {"_id": key},
            {"$set": {"value": value, "updated_at": datetime.utcnow()}},
            upsert=True,
        )

    async def acquire_lock(self, name: str, ttl_seconds: int) -> bool:
        """
        Toma el lock si no existe o si está caducado (más viejo que ttl).
        Si el documento existe y está fresco el filtro no casa, el upsert
        intenta insertar el mismo _id y Mongo responde DuplicateKeyError.
        """
        now = datetime.utcnow()
        try:
            await self.locks.update_one(
                {"_id": name, "locked_at": {"$lt": now - timedelta(seconds=ttl_seconds)}},
                {"$set": {"locked_at": now}},
                upsert=True,
            )
        except DuplicateKeyError:
            return False
        return True

    async def release_lock(self, name: str) -> None:
        await self.locks.delete_one({"_id": name})


# ---------- Dependencias ----------

async def get_dog_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> DogRepository:
    return DogRepository(db)

async def get_person_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> PersonRepository:
    return PersonRepository(db)

async def get_litter_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> LitterRepository:
    return LitterRepository(db)

async def get_puppy_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> PuppyRepository:
    return PuppyRepository(db)

async def get_event_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> EventRepository:
    return EventRepository(db)

async def get_interest_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> InterestRepository:
    return InterestRepository(db)

async def get_settings_store(db: AsyncIOMotorDatabase = Depends(get_db)) -> SettingsStore:
    return SettingsStore(db)

# app/utils.py
from typing import Any, Dict, Optional
from bson import ObjectId
from datetime import datetime

def _plain(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return to_id(value)
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value

def to_id(doc: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Documento de Mongo -> dict serializable: `_id` pasa a `id` (str),
    ObjectIds a str y datetimes a ISO, también en dicts y listas anidadas
    (títulos, pruebas de salud...). Si doc es None, devuelve {}.
    """
    if doc is None:
        return {}
    d = {key: _plain(value) for key, value in doc.items() if key != "_id"}
    if "_id" in doc:
        d["id"] = str(doc["_id"])
    return d

def to_object_id(value: Optional[str]) -> Optional[ObjectId]:
    """ObjectId a partir de un id en texto; None si falta o no es válido."""
    if not value or not ObjectId.is_valid(str(value)):
        return None
    return ObjectId(str(value))

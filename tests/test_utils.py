# tests/test_utils.py
from datetime import datetime
from bson import ObjectId

from app.utils import to_id, to_object_id


def test_to_id_converts_nested_values():
    oid, sire = ObjectId(), ObjectId()
    doc = {
        "_id": oid,
        "name": "Rex",
        "sire_id": sire,
        "created_at": datetime(2024, 1, 2, 3, 4, 5),
        "titles": [{"title": "CH", "granted_at": datetime(2023, 6, 1)}],
    }

    out = to_id(doc)

    assert out["id"] == str(oid)
    assert "_id" not in out
    assert out["sire_id"] == str(sire)
    assert out["created_at"] == "2024-01-02T03:04:05"
    assert out["titles"] == [{"title": "CH", "granted_at": "2023-06-01T00:00:00"}]
    assert to_id(None) == {}

def test_to_object_id():
    oid = ObjectId()
    assert to_object_id(str(oid)) == oid
    assert to_object_id("no-es-un-id") is None
    assert to_object_id(None) is None

from typing import Any, Dict, List

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING

from app.db.mongodb import db
from app.db.salon import salon_id_variants

COLLECTION = "salon_closed_dates"


def _serialize(document: Dict[str, Any]) -> Dict[str, Any]:
    record = dict(document)
    record["id"] = str(record.pop("_id"))
    return record


async def get_closed_dates_for_salon(raw_salon_id: str) -> List[Dict[str, Any]]:
    """Closed dates stored under the first salon id variant that has any"""
    for candidate in salon_id_variants(raw_salon_id):
        documents = await db.db[COLLECTION].find(
            {"salon_id": candidate}
        ).sort("date", ASCENDING).to_list(length=None)
        if documents:
            return [_serialize(document) for document in documents]
    return []


async def get_closed_dates_in(salon_ids: List[str]) -> List[Dict[str, Any]]:
    """Closed dates for any of ``salon_ids``, ordered by date"""
    if not salon_ids:
        return []
    documents = await db.db[COLLECTION].find(
        {"salon_id": {"$in": salon_ids}}
    ).sort("date", ASCENDING).to_list(length=None)
    return [_serialize(document) for document in documents]


async def get_closed_dates_on(salon_id: str, date: str) -> List[Dict[str, Any]]:
    documents = await db.db[COLLECTION].find(
        {"salon_id": salon_id, "date": date}
    ).to_list(length=None)
    return [_serialize(document) for document in documents]


async def insert_closed_date(closed_date: Dict[str, Any]) -> Dict[str, Any]:
    result = await db.db[COLLECTION].insert_one(dict(closed_date))
    created = await db.db[COLLECTION].find_one({"_id": result.inserted_id})
    return _serialize(created)


async def delete_closed_date(salon_id: str, date_id: str) -> bool:
    """Delete a closed date only if it belongs to ``salon_id``"""
    try:
        object_id = ObjectId(date_id)
    except (InvalidId, TypeError):
        return False
    result = await db.db[COLLECTION].delete_one({"_id": object_id, "salon_id": salon_id})
    return result.deleted_count > 0

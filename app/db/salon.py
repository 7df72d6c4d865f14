from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import uuid

from pymongo import DESCENDING
from app.db.mongodb import get_database

SALON_ID_PREFIX = "salon-"

# Salon collection helpers

def normalize_salon_id(salon_id: Optional[str]) -> str:
    """Strip the legacy ``salon-`` prefix."""
    if not salon_id:
        return ""
    return salon_id[len(SALON_ID_PREFIX):] if salon_id.startswith(SALON_ID_PREFIX) else salon_id

def salon_id_variants(raw_salon_id: Optional[str]) -> List[str]:
    """
    Ids a salon may be stored under, most specific first: the raw id, the
    same id with the prefix toggled, then the normalized id.
    """
    if not raw_salon_id:
        return []
    normalized = normalize_salon_id(raw_salon_id)
    if raw_salon_id.startswith(SALON_ID_PREFIX):
        toggled = normalized
    else:
        toggled = f"{SALON_ID_PREFIX}{normalized}"

    variants: List[str] = []
    for candidate in (raw_salon_id, toggled, normalized):
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants

async def get_salon_by_any_id(raw_salon_id: str) -> Optional[Dict[str, Any]]:
    """
    Get a salon document trying every id variant in order
    """
    db = await get_database()
    for candidate in salon_id_variants(raw_salon_id):
        salon = await db["salons"].find_one({"_id": candidate})
        if salon:
            return salon
    return None

async def get_latest_salon() -> Optional[Dict[str, Any]]:
    db = await get_database()
    salons = await db["salons"].find({}).sort("created_at", DESCENDING).to_list(length=1)
    return salons[0] if salons else None

async def create_salon(name: str, owner_id: str) -> Dict[str, Any]:
    db = await get_database()
    salon = {
        "_id": f"{SALON_ID_PREFIX}{uuid.uuid4()}",
        "name": name,
        "user_id": owner_id,
        "created_at": datetime.now(timezone.utc),
    }
    await db["salons"].insert_one(salon)
    return salon

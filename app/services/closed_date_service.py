import logging
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.db import closed_dates as closed_dates_db
from app.db.salon import get_latest_salon, get_salon_by_any_id, salon_id_variants
from app.schemas.closed_date import ClosedDateCreate
from app.utils.closed_dates import encode_stylist_reason, normalize_closed_date_record

logger = logging.getLogger(__name__)


class SalonNotFoundError(Exception):
    pass


class SalonAccessDeniedError(Exception):
    pass


class ClosedDateConflictError(Exception):
    pass


class ClosedDateNotFoundError(Exception):
    pass


async def get_salon_closed_dates(salon_id: str) -> List[Dict[str, Any]]:
    """
    All closed dates of a salon, normalized so that ``reason`` is plain text
    """
    records = await closed_dates_db.get_closed_dates_for_salon(salon_id)
    normalized = [normalize_closed_date_record(record) for record in records]
    logger.debug(
        "Closed dates for %s: %s",
        salon_id,
        [
            (record["id"], record["date"], record.get("stylist_id"), record.get("_hasEncodedStylist", False))
            for record in normalized
        ],
    )
    return normalized


async def get_public_closed_dates(salon_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Closed dates shown on the booking page. Without a salon id the most
    recently created salon is used.
    """
    candidates = salon_id_variants(salon_id)
    if not candidates:
        salon = await get_latest_salon()
        if not salon:
            return []
        candidates = salon_id_variants(salon["_id"])

    records = await closed_dates_db.get_closed_dates_in(candidates)
    return [normalize_closed_date_record(record) for record in records]


async def _get_owned_salon(raw_salon_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    salon = await get_salon_by_any_id(raw_salon_id)
    if not salon:
        raise SalonNotFoundError(raw_salon_id)
    if salon.get("user_id") != str(user["_id"]):
        logger.warning(
            "User %s tried to modify salon %s owned by %s",
            user["_id"], salon["_id"], salon.get("user_id"),
        )
        raise SalonAccessDeniedError(raw_salon_id)
    return salon


async def add_closed_date(
    raw_salon_id: str, closed_date_in: ClosedDateCreate, user: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Add a closed date for a salon, or for one stylist of the salon.

    Stylist closures always carry the stylist in an encoded ``reason``; the
    native ``stylist_id`` field is written as well unless
    ``CLOSED_DATES_NATIVE_STYLIST_COLUMN`` is disabled.
    """
    salon = await _get_owned_salon(raw_salon_id, user)
    salon_id = salon["_id"]
    stylist_id = closed_date_in.stylistId

    existing = await closed_dates_db.get_closed_dates_on(salon_id, closed_date_in.date)
    for record in existing:
        if normalize_closed_date_record(record).get("stylist_id") == stylist_id:
            raise ClosedDateConflictError(closed_date_in.date)

    reason = closed_date_in.reason or None
    if stylist_id:
        reason = encode_stylist_reason(closed_date_in.reason, stylist_id)

    document = {
        "salon_id": salon_id,
        "date": closed_date_in.date,
        "reason": reason,
        "start_time": closed_date_in.startTime,
        "end_time": closed_date_in.endTime,
    }
    if stylist_id and settings.CLOSED_DATES_NATIVE_STYLIST_COLUMN:
        document["stylist_id"] = stylist_id

    created = await closed_dates_db.insert_closed_date(document)
    normalized = normalize_closed_date_record(created)
    logger.info(
        "Closed date %s added for salon %s (stylist: %s)",
        normalized["date"], salon_id, normalized.get("stylist_id"),
    )
    return normalized


async def remove_closed_date(raw_salon_id: str, date_id: str, user: Dict[str, Any]) -> None:
    salon = await _get_owned_salon(raw_salon_id, user)
    deleted = await closed_dates_db.delete_closed_date(salon["_id"], date_id)
    if not deleted:
        raise ClosedDateNotFoundError(date_id)
    logger.info("Closed date %s removed from salon %s", date_id, salon["_id"])

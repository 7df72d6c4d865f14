"""
Stylist closure encoding for the salon_closed_dates collection.

Closed dates were first stored per salon only. Stylist-specific closures are
carried inside the free-text ``reason`` field as a small JSON envelope::

    {"type": "stylist-closure-v1", "version": 1, "stylistId": "...",
     "label": "Congé", "encodedAt": "2025-06-01T09:00:00.000Z"}

Records read back from storage go through ``normalize_closed_date_record`` so
callers always see a plain ``reason`` and a ``stylist_id``, wherever it was
stored.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

STYLIST_REASON_META = "stylist-closure-v1"
STYLIST_REASON_VERSION = 1
ENCODED_STYLIST_FLAG = "_hasEncodedStylist"


class StylistClosurePayload(BaseModel):
    """Envelope stored in ``reason``. Unknown fields are ignored."""
    type: Optional[Any] = None
    version: Optional[Any] = None
    stylistId: Optional[str] = None
    label: str = ""
    encodedAt: Optional[Any] = None

    @field_validator("stylistId", mode="before")
    @classmethod
    def _stylist_id_as_str(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("label", mode="before")
    @classmethod
    def _label_as_str(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class Ok:
    payload: StylistClosurePayload


@dataclass(frozen=True)
class Err:
    reason: str


ParseResult = Union[Ok, Err]


@dataclass(frozen=True)
class DecodedReason:
    stylist_id: Optional[str]
    label: str


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def encode_stylist_reason(reason_text: Optional[str], stylist_id: str) -> str:
    """Embed ``stylist_id`` and the human readable reason into one string."""
    return json.dumps(
        {
            "type": STYLIST_REASON_META,
            "version": STYLIST_REASON_VERSION,
            "stylistId": stylist_id,
            "label": reason_text if reason_text is not None else "",
            "encodedAt": _utc_timestamp(),
        },
        ensure_ascii=False,
        separators=(",", ":"),
    )


def _has_stylist_marker(parsed: Dict[str, Any]) -> bool:
    # Empty lists and objects count as a marker; the id itself is coerced later
    value = parsed.get("stylistId")
    if value is None or value is False or value == "":
        return False
    if isinstance(value, (int, float)) and (value == 0 or value != value):
        return False
    return True


def parse_stylist_reason(reason_value: Any) -> ParseResult:
    """Parse a stored reason into a payload, or explain why it is not one.

    Plain-text reasons are the common case and come back as ``Err`` without
    any JSON parsing being attempted.
    """
    if not reason_value or not isinstance(reason_value, str):
        return Err("not a string")

    trimmed = reason_value.strip()
    if not trimmed.startswith("{") or not trimmed.endswith("}"):
        return Err("plain text")

    try:
        parsed = json.loads(trimmed)
    except (ValueError, RecursionError) as error:
        logger.warning("Could not parse closed date reason: %s", error)
        return Err("invalid json")

    if not isinstance(parsed, dict):
        return Err("not an object")
    # Payloads missing the type tag are still accepted when they carry a stylist
    if not _has_stylist_marker(parsed) and parsed.get("type") != STYLIST_REASON_META:
        return Err("not a stylist closure")

    return Ok(StylistClosurePayload.model_validate(parsed))


def decode_stylist_reason(reason_value: Any) -> Optional[DecodedReason]:
    """Return the stylist id and label embedded in ``reason_value``, if any."""
    result = parse_stylist_reason(reason_value)
    if isinstance(result, Err):
        return None
    return DecodedReason(
        stylist_id=result.payload.stylistId,
        label=result.payload.label,
    )


def normalize_closed_date_record(record: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Reconcile native and encoded stylist ids on a closed date record.

    A native ``stylist_id`` always wins over the encoded one. The returned dict
    is a shallow copy; the input is never modified.
    """
    if record is None:
        return record

    normalized = dict(record)
    decoded = decode_stylist_reason(record.get("reason"))
    if decoded:
        normalized["reason"] = decoded.label or ""
        if not normalized.get("stylist_id") and decoded.stylist_id:
            normalized["stylist_id"] = decoded.stylist_id
        normalized[ENCODED_STYLIST_FLAG] = True

    return normalized

"""
Normalization of persisted plan records.

Plan documents may come back from the store with JSON fields as text or as
structured values and with timestamps as text or as datetimes, depending on
which writer produced them (this service writes structured values; records
imported from the previous system carry JSON text and camelCase keys).
``normalize_plan`` turns any of those shapes into one canonical ``Plan`` or
fails with a ``NormalizationError`` naming the offending field.
"""

import copy
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from bson import ObjectId

from marketing_planner.models.plan import Plan, PlanStatus

logger = logging.getLogger(__name__)

_MISSING = object()

REQUIRED_TEMPORAL_FIELDS = ("created_at", "updated_at")
OPTIONAL_TEMPORAL_FIELDS = ("completed_at",)
REQUIRED_JSON_FIELDS = ("business_context", "questionnaire_responses")
OPTIONAL_JSON_FIELDS = ("claude_analysis", "generated_content", "plan_metadata")


class NormalizationError(Exception):
    """Raised when a plan record cannot be brought into canonical shape."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _lookup(raw: Mapping[str, Any], name: str) -> Any:
    if name in raw:
        return raw[name]
    return raw.get(_camel(name), _MISSING)


def _parse_datetime(field: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise NormalizationError(field, f"invalid ISO-8601 timestamp {value!r}")
    else:
        raise NormalizationError(field, f"expected a timestamp, got {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_json_object(field: str, value: Any) -> Dict[str, Any]:
    if isinstance(value, Mapping):
        return copy.deepcopy(dict(value))
    if isinstance(value, (str, bytes)):
        try:
            parsed = json.loads(value)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise NormalizationError(field, f"invalid JSON: {e}")
        if not isinstance(parsed, dict):
            raise NormalizationError(field, f"expected a JSON object, got {type(parsed).__name__}")
        return parsed
    raise NormalizationError(field, f"expected an object or JSON text, got {type(value).__name__}")


def _record_id(raw: Mapping[str, Any]) -> str:
    value = raw.get("id", raw.get("_id"))
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, str) and value:
        return value
    raise NormalizationError("id", "missing record identifier")


def _status(raw: Mapping[str, Any]) -> PlanStatus:
    value = _lookup(raw, "status")
    if isinstance(value, PlanStatus):
        return value
    if isinstance(value, str):
        try:
            return PlanStatus(value)
        except ValueError:
            pass
    allowed = ", ".join(s.value for s in PlanStatus)
    shown = "missing" if value is _MISSING else repr(value)
    raise NormalizationError("status", f"{shown} is not one of: {allowed}")


def _completion_percentage(raw: Mapping[str, Any]) -> int:
    value = _lookup(raw, "completion_percentage")
    if value is _MISSING or value is None:
        return 0
    if isinstance(value, bool):
        raise NormalizationError("completion_percentage", "expected an integer, got bool")
    if isinstance(value, float) and not value.is_integer():
        raise NormalizationError("completion_percentage", f"expected an integer, got {value!r}")
    try:
        percentage = int(value)
    except (TypeError, ValueError, OverflowError):
        raise NormalizationError("completion_percentage", f"expected an integer, got {value!r}")
    if not 0 <= percentage <= 100:
        raise NormalizationError("completion_percentage", f"{percentage} is outside 0..100")
    return percentage


def _optional_text(raw: Mapping[str, Any], name: str) -> Optional[str]:
    value = _lookup(raw, name)
    if value is _MISSING or value is None:
        return None
    return str(value)


def normalize_plan(raw: Any) -> Plan:
    """Convert a stored plan record into a canonical Plan.

    Required fields (timestamps, business context, questionnaire responses,
    status) raise NormalizationError when missing or unparseable. Optional
    JSON fields that cannot be parsed are dropped. The function has no side
    effects and is idempotent: a Plan, or a dump of one, comes back equal.
    """
    if isinstance(raw, Plan):
        return raw
    if not isinstance(raw, Mapping):
        raise NormalizationError("record", f"expected a mapping, got {type(raw).__name__}")

    values: Dict[str, Any] = {
        "id": _record_id(raw),
        "user_id": _optional_text(raw, "user_id"),
        "status": _status(raw),
        "completion_percentage": _completion_percentage(raw),
    }

    for name in REQUIRED_TEMPORAL_FIELDS:
        value = _lookup(raw, name)
        if value is _MISSING or value is None:
            raise NormalizationError(name, "missing required timestamp")
        values[name] = _parse_datetime(name, value)

    for name in OPTIONAL_TEMPORAL_FIELDS:
        value = _lookup(raw, name)
        values[name] = None if value is _MISSING or value is None else _parse_datetime(name, value)

    for name in REQUIRED_JSON_FIELDS:
        value = _lookup(raw, name)
        if value is _MISSING or value is None:
            raise NormalizationError(name, "missing required field")
        values[name] = _parse_json_object(name, value)

    for name in OPTIONAL_JSON_FIELDS:
        value = _lookup(raw, name)
        if value is _MISSING or value is None:
            values[name] = None
            continue
        try:
            values[name] = _parse_json_object(name, value)
        except NormalizationError as e:
            logger.warning(f"Dropping unparseable optional field on plan {values['id']}: {e}")
            values[name] = None

    return Plan(**values)

"""Conversion of arbitrary failures into JSON-safe error snapshots.

The snapshot is what a caller sees under ``error.data``. Only an allow-list
of diagnostic fields is copied, and with ``sanitize`` the fields that reveal
file-system paths or network addresses are dropped as well.
"""
import traceback
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Set

from .codec import format_datetime

DEFAULT_PROPERTIES = (
    "message",
    "stack",
    "code",
    "cause",
    "errno",
    "strerror",
    "syscall",
    "address",
    "port",
    "path",
    "filename",
    "filename2",
    "dest",
    "info",
    "reason",
    "function",
    "library",
)

SENSITIVE_PROPERTIES = frozenset({"address", "path", "filename", "filename2"})


def normalize_error(
    failure: Any,
    sanitize: bool = False,
    properties: Iterable[str] = DEFAULT_PROPERTIES,
) -> Optional[Dict[str, Any]]:
    """Build a bounded, acyclic snapshot of ``failure``.

    Args:
        failure: Exception, mapping, plain object or any other value
        sanitize: Drop location-revealing fields (always on for callers)
        properties: Allow-list of fields copied from the failure

    Returns:
        Snapshot dict tagged with ``type``, or None for a None failure
    """
    return _normalize(failure, sanitize, tuple(properties), set())


def _normalize(
    failure: Any, sanitize: bool, properties: tuple, seen: Set[int]
) -> Optional[Dict[str, Any]]:
    if failure is None:
        return None

    seen = seen | {id(failure)}
    include = [
        prop for prop in properties
        if not (sanitize and prop in SENSITIVE_PROPERTIES)
    ]

    result: Dict[str, Any] = {}
    for prop in include:
        try:
            found, value = _read_property(failure, prop)
            if found:
                result[prop] = _json_safe(value, sanitize, properties, seen)
        except Exception:
            result[prop] = f"<unreadable {prop}>"

    if isinstance(failure, BaseException):
        try:
            nested = getattr(failure, "nested", None) or failure.__cause__
        except Exception:
            nested = failure.__cause__
        if isinstance(nested, BaseException) and id(nested) not in seen:
            result["type"] = "NestedError"
            result["nested"] = _normalize(nested, sanitize, properties, seen)
        else:
            result["type"] = "Error"
    elif isinstance(failure, Mapping):
        result["type"] = "Object"
        _merge_own_fields(result, failure, sanitize, properties, seen)
    elif hasattr(failure, "__dict__") and not isinstance(failure, type):
        result["type"] = "Object"
        _merge_own_fields(result, vars(failure), sanitize, properties, seen)
    else:
        result["type"] = "Default"
        result["instance"] = _json_safe(failure, sanitize, properties, seen)

    return result


def _read_property(failure: Any, prop: str):
    """Return ``(found, value)`` for one allow-listed field."""
    if isinstance(failure, Mapping):
        if prop in failure:
            return True, failure[prop]
        return False, None

    if isinstance(failure, BaseException):
        if prop == "message":
            message = getattr(failure, "message", None)
            return True, message if isinstance(message, str) else safe_str(failure)
        if prop == "stack":
            lines = traceback.format_exception(
                type(failure), failure, failure.__traceback__, chain=False
            )
            return True, "".join(lines)

    if prop.startswith("_"):
        return False, None
    value = getattr(failure, prop, None)
    # OSError and friends expose unset diagnostics as None
    return value is not None, value


def _merge_own_fields(
    result: Dict[str, Any], fields: Mapping, sanitize: bool, properties: tuple, seen: Set[int]
) -> None:
    try:
        items = list(fields.items())
    except Exception:
        result["fields"] = "<unreadable fields>"
        return
    for key, value in items:
        if sanitize and key in SENSITIVE_PROPERTIES:
            continue
        try:
            result[safe_str(key)] = _json_safe(value, sanitize, properties, seen)
        except Exception:
            result[safe_str(key)] = "<unreadable value>"


def safe_str(value: Any) -> str:
    """``str(value)``, or a placeholder when its ``__str__`` raises."""
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__} object>"


def safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:
        return f"<unprintable {type(value).__name__} object>"


def _json_safe(value: Any, sanitize: bool, properties: tuple, seen: Set[int]) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, datetime):
        return format_datetime(value)
    if id(value) in seen:
        return safe_repr(value)
    if isinstance(value, BaseException):
        return _normalize(value, sanitize, properties, seen)
    if isinstance(value, Mapping):
        inner = seen | {id(value)}
        return {
            safe_str(key): _json_safe(item, sanitize, properties, inner)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        inner = seen | {id(value)}
        return [_json_safe(item, sanitize, properties, inner) for item in value]
    return safe_repr(value)

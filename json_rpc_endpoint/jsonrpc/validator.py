"""JSON-RPC 2.0 envelope validation."""
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from .models import ErrorCode, RequestId


@dataclass(frozen=True)
class ValidRequest:
    method: str
    params: Any = field(default_factory=dict)
    id: RequestId = None


@dataclass(frozen=True)
class InvalidRequest:
    id: RequestId
    message: str
    code: int = ErrorCode.INVALID_REQUEST


ValidationResult = Union[ValidRequest, InvalidRequest]


def extract_id(raw_body: Any) -> RequestId:
    """Return the request id, or None when absent or not a string/number."""
    if not isinstance(raw_body, Mapping):
        return None
    request_id = raw_body.get("id")
    if isinstance(request_id, bool) or not isinstance(request_id, (str, int, float)):
        return None
    return request_id


def validate(raw_body: Any) -> ValidationResult:
    """Validate a parsed request body.

    Rules are checked in order and the first failure wins. ``params`` is
    not inspected; a missing ``params`` becomes an empty dict and an
    explicit null stays None.
    """
    request_id = extract_id(raw_body)

    if not isinstance(raw_body, Mapping) or raw_body.get("jsonrpc") != "2.0":
        return InvalidRequest(
            id=request_id,
            message="Invalid Request: 'jsonrpc' must be '2.0'.",
        )

    method = raw_body.get("method")
    if not isinstance(method, str):
        return InvalidRequest(
            id=request_id,
            message="Invalid Request: 'method' must be a string.",
        )

    return ValidRequest(
        method=method,
        params=raw_body["params"] if "params" in raw_body else {},
        id=request_id,
    )

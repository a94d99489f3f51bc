"""JSON-RPC 2.0 request handler."""
import asyncio
import inspect
import logging
from typing import Any, Dict, Optional

from . import codec
from .models import ErrorCode
from .normalizer import normalize_error, safe_str
from .registry import MethodHandler, MethodRegistry
from .response import build_error, build_response
from .validator import InvalidRequest, validate

logger = logging.getLogger(__name__)


class JSONRPCHandler:
    """Validates JSON-RPC 2.0 requests and routes them to registered methods.

    Every handler is called as ``handler(request, context, params)`` where
    ``context`` is the object given here, shared by all calls and never
    touched by the handler itself.
    """

    def __init__(
        self,
        context: Any = None,
        registry: Optional[MethodRegistry] = None,
        decode_params: bool = False,
        handler_timeout: Optional[float] = None,
    ):
        self.context = context
        self.registry = registry if registry is not None else MethodRegistry()
        self.decode_params = decode_params
        self.handler_timeout = handler_timeout

    def register_method(self, method_name: str, handler: MethodHandler):
        """Register a JSON-RPC method handler.

        Args:
            method_name: Name of the JSON-RPC method (e.g., "getUserData")
            handler: Sync or async callable taking (request, context, params)
        """
        self.registry.register(method_name, handler)

    @property
    def methods(self):
        return self.registry.entries()

    async def handle_request(self, raw_body: Any, request: Any = None) -> Dict[str, Any]:
        """Handle a parsed JSON-RPC 2.0 request body.

        Args:
            raw_body: Parsed JSON body, not yet validated
            request: Transport request handed to the method handler

        Returns:
            Response envelope with either result or error
        """
        validated = validate(raw_body)
        if isinstance(validated, InvalidRequest):
            logger.warning(f"Rejected JSON-RPC request: {validated.message}")
            return build_error(validated.id, validated.code, validated.message)

        handler = self.registry.lookup(validated.method)
        if handler is None:
            logger.warning(f"JSON-RPC method not found: {validated.method}")
            return build_error(
                validated.id,
                ErrorCode.METHOD_NOT_FOUND,
                f'Method "{validated.method}" not found',
            )

        try:
            logger.debug(f"Dispatching JSON-RPC method: {validated.method}")
            params = validated.params
            if self.decode_params:
                params = codec.decode(params)

            result = await self._invoke(validated.method, handler, request, params)
            return build_response(validated.id, result=codec.encode(result))

        except Exception as e:
            return _failure_response(validated.id, validated.method, e)

    async def _invoke(self, method_name: str, handler: MethodHandler, request: Any, params: Any) -> Any:
        result = handler(request, self.context, params)
        if not inspect.isawaitable(result):
            return result

        if self.handler_timeout is None:
            return await result
        try:
            return await asyncio.wait_for(result, timeout=self.handler_timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(f'Method "{method_name}" timed out') from None


def _failure_response(request_id: Any, method_name: str, error: Exception) -> Dict[str, Any]:
    """Error envelope for a failed call; falls back to a bare -32603."""
    try:
        logger.error(
            f"Error handling {method_name}: {type(error).__name__}: {safe_str(error)}",
            exc_info=error,
        )
        return build_error(
            request_id,
            _error_code(error),
            _error_message(error),
            normalize_error(error, sanitize=True),
        )
    except Exception:
        logger.error(f"Could not describe failure of {method_name}", exc_info=True)
        return build_error(request_id, ErrorCode.INTERNAL_ERROR, "Internal error")


def _error_code(error: Exception) -> int:
    try:
        code = getattr(error, "code", None)
    except Exception:
        return ErrorCode.INTERNAL_ERROR
    if isinstance(code, int) and not isinstance(code, bool):
        return code
    return ErrorCode.INTERNAL_ERROR


def _error_message(error: Exception) -> str:
    try:
        message = getattr(error, "message", None)
    except Exception:
        message = None
    if isinstance(message, str) and message:
        return message
    try:
        return str(error) or "Internal error"
    except Exception:
        return "Internal error"

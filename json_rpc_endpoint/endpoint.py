"""FastAPI mounting for the JSON-RPC 2.0 handler."""
import json
import logging
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .jsonrpc import codec
from .jsonrpc.handler import JSONRPCHandler
from .jsonrpc.models import ErrorCode
from .jsonrpc.normalizer import normalize_error
from .jsonrpc.registry import MethodHandler
from .jsonrpc.response import build_error

logger = logging.getLogger(__name__)

C = TypeVar("C")


class JsonRPCEndpoint(Generic[C]):
    """JSON-RPC 2.0 endpoint attached to a FastAPI router.

    Example:
        >>> app = FastAPI()
        >>> rpc = JsonRPCEndpoint(app, {"user": "admin"})
        >>> rpc.add_method("add", lambda req, ctx, p: p["a"] + p["b"])
    """

    def __init__(
        self,
        router: Union[FastAPI, APIRouter],
        context: C,
        endpoint: str = "/api",
        decode_params: bool = False,
        handler_timeout: Optional[float] = None,
    ):
        """Wire a POST route for JSON-RPC 2.0 requests.

        Args:
            router: FastAPI app or APIRouter to attach the route to
            context: Object passed to every method handler
            endpoint: Path the route answers on
            decode_params: Run params through the codec before dispatch
            handler_timeout: Seconds before an async handler is abandoned
        """
        self._endpoint = endpoint
        self.handler = JSONRPCHandler(
            context=context,
            decode_params=decode_params,
            handler_timeout=handler_timeout,
        )
        router.add_api_route(endpoint, self._handle_post, methods=["POST"])
        logger.info(f"JSON-RPC endpoint mounted at {endpoint}")

    async def _handle_post(self, request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Unparseable JSON-RPC body on {self._endpoint}: {e}")
            return JSONResponse(build_error(None, ErrorCode.PARSE_ERROR, "Parse error"))

        response = await self.handler.handle_request(body, request)
        try:
            # JSONResponse renders on construction and rejects NaN/Infinity
            return JSONResponse(jsonable_encoder(response))
        except (TypeError, ValueError) as e:
            logger.error(f"Unserializable JSON-RPC response: {e}", exc_info=True)
            return JSONResponse(build_error(
                response.get("id"),
                ErrorCode.INTERNAL_ERROR,
                "Internal error",
                normalize_error(e, sanitize=True),
            ))

    def add_method(self, name: str, handler: MethodHandler) -> None:
        """Register a JSON-RPC method (e.g. "getUserData")."""
        self.handler.register_method(name, handler)

    def method(self, name: Optional[str] = None) -> Callable[[MethodHandler], MethodHandler]:
        """Decorator form of :meth:`add_method`; defaults to the function name."""
        def decorator(func: MethodHandler) -> MethodHandler:
            self.add_method(name or func.__name__, func)
            return func
        return decorator

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def context(self) -> C:
        return self.handler.context

    @property
    def methods(self):
        """Read-only view of all registered methods."""
        return self.handler.methods

    @staticmethod
    def serialize(value: Any) -> Any:
        return codec.encode(value)

    @staticmethod
    def deserialize(value: Any) -> Any:
        return codec.decode(value)

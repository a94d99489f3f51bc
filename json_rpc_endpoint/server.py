"""Example FastAPI server exposing a JSON-RPC 2.0 endpoint."""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request

from .config import Settings, load_settings
from .endpoint import JsonRPCEndpoint
from .utils.errors import InvalidParamsError, RPCError

logger = logging.getLogger(__name__)

__version__ = "1.0.0"


@dataclass
class AppContext:
    """Shared state handed to every method handler."""
    user: str = "admin"
    api_token: str = "my-secret-token"


def register_methods(rpc: JsonRPCEndpoint):
    """Register the example JSON-RPC methods."""

    # Method: add
    def add(request: Request, ctx: AppContext, params: Any):
        try:
            return params["a"] + params["b"]
        except (KeyError, TypeError) as e:
            raise InvalidParamsError("'a' and 'b' are required") from e

    # Method: greet
    def greet(request: Request, ctx: AppContext, params: Any):
        name = params.get("name") if isinstance(params, dict) else None
        if not name:
            raise InvalidParamsError("'name' is required")
        return f"Hello, {name}!"

    # Method: getTime
    async def get_time(request: Request, ctx: AppContext, params: Any):
        return datetime.now(timezone.utc)

    # Method: echo
    async def echo(request: Request, ctx: AppContext, params: Any):
        return params

    # Method: invalid-token
    def check_token(request: Request, ctx: AppContext, params: Any):
        token = request.headers.get("authorization") if request is not None else None
        if not token or token != ctx.api_token:
            raise RPCError("Invalid or missing token", code=401)
        return "OK"

    rpc.add_method("add", add)
    rpc.add_method("greet", greet)
    rpc.add_method("getTime", get_time)
    rpc.add_method("echo", echo)
    rpc.add_method("invalid-token", check_token)


def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """Build the FastAPI app with the example methods registered."""
    settings = settings or load_settings()
    context = context or AppContext()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle manager for FastAPI app."""
        logger.info(f"Starting JSON-RPC server on {settings.endpoint}...")
        logger.info(f"Registered {len(rpc.methods)} JSON-RPC methods")
        yield
        logger.info("Shutting down JSON-RPC server...")

    app = FastAPI(
        title="JSON-RPC Endpoint",
        description="JSON-RPC 2.0 endpoint with lossless big integer and datetime values",
        version=__version__,
        lifespan=lifespan,
    )

    rpc = JsonRPCEndpoint(
        app,
        context,
        endpoint=settings.endpoint,
        decode_params=settings.decode_params,
        handler_timeout=settings.handler_timeout,
    )
    register_methods(rpc)
    app.state.rpc = rpc

    # Monitoring Endpoints
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "json-rpc-endpoint",
            "version": __version__,
            "endpoint": rpc.endpoint,
            "methods": sorted(rpc.methods),
        }

    return app


def main():
    """Run the example server with uvicorn."""
    import uvicorn

    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


app = create_app()


if __name__ == "__main__":
    main()

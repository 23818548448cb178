"""FastAPI MCP server for fractal-prose."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from . import __version__
from .config import settings
from .engine.handlers import HandlerContext
from .mcp import PARSE_ERROR, dispatch, jsonrpc_error
from .store import ProjectStore

logger = logging.getLogger(__name__)


def create_app(ctx: HandlerContext | None = None) -> FastAPI:
    """Build the app serving the prose tools for one project.

    Args:
        ctx: Handler context; defaults to a store rooted at ``settings.project_root``

    Returns:
        FastAPI app with ``POST /mcp`` (JSON-RPC) and ``GET /health``
    """
    if ctx is None:
        ctx = HandlerContext(store=ProjectStore())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting fractal-prose MCP server v{__version__} for {ctx.store.root}")
        yield
        logger.info("fractal-prose MCP server stopped")

    app = FastAPI(
        title="fractal-prose MCP Server",
        description="Structured-prose chapter tools over MCP (JSON-RPC)",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.ctx = ctx

    # ============ HEALTH ENDPOINTS ============

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Liveness check."""
        return {"status": "healthy", "version": __version__}

    # ============ MCP ENDPOINTS ============

    @app.post("/mcp", tags=["MCP Transport"])
    async def mcp_transport_endpoint(request: Request):
        """
        MCP Streamable HTTP endpoint (JSON-RPC format).

        Accepts a single request or a batch. Notifications get 204 No Content.
        """
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse(jsonrpc_error(None, PARSE_ERROR, "Parse error"), status_code=400)

        response = await dispatch(body, ctx)
        return JSONResponse(response) if response is not None else Response(status_code=204)

    return app


def run(
    ctx: HandlerContext | None = None,
    host: str | None = None,
    port: int | None = None,
    log_level: str | None = None,
):
    """Run the server with uvicorn."""
    import uvicorn

    uvicorn.run(
        create_app(ctx),
        host=host or settings.host,
        port=port or settings.port,
        log_level=log_level or settings.log_level,
    )

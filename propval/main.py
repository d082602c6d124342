from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Routers
from .routers.valuation import router as valuation_router
from .routers.properties import router as properties_router
from .routers.analysis import router as analysis_router

# Core modules
from .core.config import settings
from .core.logging import configure_logging, CorrelationIdMiddleware
from .core.metrics import PromMiddleware, metrics_endpoint
from .data.store import PropertyStore
from .models.base import InvalidInput
from .models.llm import build_openai_client

_UNSET: Any = object()

def create_app(openai_client: Any = _UNSET) -> FastAPI:
    """
    App factory so tests and ASGI servers can instantiate cleanly.

    ``openai_client`` overrides the chat client built from settings;
    pass ``None`` to force the table-driven fallback.
    """
    configure_logging()  # Set up JSON logs + request-id filter

    app = FastAPI(
        title="Property Valuation API",
        version="1.0.0",
        description="Indonesian property valuation with AI analysis and a deterministic fallback engine.",
    )

    # One chat client and one placeholder store per app instance
    app.state.openai_client = build_openai_client(settings) if openai_client is _UNSET else openai_client
    app.state.store = PropertyStore()

    # CORS: allow the form UI to call the API.
    allow_origins = [o.strip() for o in settings.ALLOW_ORIGINS.split(",")] if settings.ALLOW_ORIGINS else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag","X-Request-Id"],
    )

    # Observability middlewares
    app.add_middleware(CorrelationIdMiddleware)  # Adds/propagates X-Request-Id
    if settings.PROMETHEUS_ENABLED:
        app.add_middleware(PromMiddleware)       # Records req/latency metrics

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(request: Request, exc: InvalidInput):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    # Meta routes
    @app.get("/v1/health", tags=["meta"])
    def health():
        return {"status": "ok", "ai_enabled": app.state.openai_client is not None}

    @app.get("/v1/ping", tags=["meta"])
    def ping():
        return {"pong": True}

    if settings.PROMETHEUS_ENABLED:
        # Standard Prometheus scrape endpoint
        app.add_route("/v1/metrics", metrics_endpoint, methods=["GET"])

    # Business routes
    app.include_router(valuation_router, prefix="/v1", tags=["valuation"])
    app.include_router(properties_router, prefix="/v1", tags=["properties"])
    app.include_router(analysis_router, prefix="/v1", tags=["analysis"])

    return app

app = create_app()

"""
Movie Review Board API — FastAPI application entry point.

Routers are registered here. Each service lives in app/api/.

Every router is mounted twice: under /api (the Next.js API route paths)
and under /.netlify/functions (the Netlify Functions paths), so a client
picks its prefix from configuration and both deployments behave alike.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import forms as forms_api
from app.api import reviews as reviews_api
from app.api.errors import http_exception_handler, store_unavailable_handler
from app.core.config import settings
from app.core.logging import configure_logging
from app.services.review_store import StoreUnavailableError

API_PREFIXES = ("/api", "/.netlify/functions")

configure_logging()

app = FastAPI(
    title="Movie Review Board API",
    description="Collects movie reviews and lists them newest first.",
    version="0.1.0",
    docs_url="/docs" if settings.ENABLE_DOCS else None,
    redoc_url="/redoc" if settings.ENABLE_DOCS else None,
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
for prefix in API_PREFIXES:
    app.include_router(reviews_api.router, prefix=prefix, tags=["reviews"])
    app.include_router(forms_api.router,   prefix=prefix, tags=["forms"])


# ── Health check ──────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
def health_check() -> dict:
    """Liveness probe. Returns 200 when the server is up."""
    return {
        "status": "ok",
        "version": app.version,
        "env": settings.APP_ENV,
        "database_configured": settings.database_configured,
        "forms_configured": settings.forms_configured,
    }

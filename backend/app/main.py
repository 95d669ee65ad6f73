"""Main FastAPI application for the Rebooted backend."""
from fastapi import FastAPI, Request

from app.api.routes.assignments import router as assignments_router
from app.api.routes.blocking import router as blocking_router
from app.api.routes.jobs import router as jobs_router
from app.api.routes.preferences import router as preferences_router
from app.api.routes.projects import router as projects_router
from app.core.config import settings
from app.core.logging import configure_logging
from app.core.middleware import RequestIDMiddleware
from app.observability.client import init_opik
from app.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(preferences_router)
app.include_router(projects_router)
app.include_router(assignments_router)
app.include_router(blocking_router)
app.include_router(jobs_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}

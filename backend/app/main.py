"""FastAPI application."""

from fastapi import FastAPI

from backend.app.api.errors import register_error_handlers
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.licenses import router as licenses_router
from backend.app.api.routes.listings import router as listings_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.superadmin import router as superadmin_router
from backend.app.logging_config import setup_logging

setup_logging()

app = FastAPI(title="Brokerage Core API", version="0.1.0")

register_error_handlers(app)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(listings_router)
app.include_router(licenses_router)
app.include_router(superadmin_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Brokerage Core API", "version": "0.1.0"}

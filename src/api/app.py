"""FastAPI application exposing the billing triggers."""

import logging

from fastapi import FastAPI

from src.api.billing import router as billing_router
from src.api.errors import register_error_handlers

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Costshare",
    description="Weighted expense allocation and billing for communities",
    version="0.1.0",
)

register_error_handlers(app)
app.include_router(billing_router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint for monitoring."""
    return {"status": "ok"}


__all__ = ["app"]

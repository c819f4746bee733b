from fastapi import FastAPI

from .notifications import router as notifications_router
from .schedulers import router as schedulers_router
from .sms import router as sms_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(notifications_router)
    app.include_router(sms_router)
    app.include_router(schedulers_router)

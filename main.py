import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI

from portal_notifications.application.events import EventBus
from portal_notifications.application.handlers import (
    HandlerContext,
    register_notification_handlers,
)
from portal_notifications.application.notifications import NotificationStore
from portal_notifications.application.schedulers import (
    build_notification_jobs,
    build_scheduler,
)
from portal_notifications.config import Settings, get_settings
from portal_notifications.infrastructure.channels import EmailService, SMSService
from portal_notifications.infrastructure.database import (
    build_engine,
    build_session_factory,
    initialize_database,
)
from portal_notifications.infrastructure.repositories import default_profile_registry
from portal_notifications.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application and wire the notification core on startup."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the database, channels, bus and schedulers; release them on shutdown."""

        engine = build_engine(settings)
        await initialize_database(engine)
        session_factory = build_session_factory(engine)
        profiles = default_profile_registry()

        email = EmailService()
        email.configure(settings.email_provider, settings)
        sms = SMSService()
        sms.configure(settings.sms_provider, settings)

        store = NotificationStore(
            session_factory,
            profiles=profiles,
            retention=timedelta(days=settings.notification_retention_days),
        )
        bus = EventBus(handler_timeout=settings.handler_timeout_seconds)
        context = HandlerContext(
            store=store,
            email=email,
            sms=sms,
            session_factory=session_factory,
            profiles=profiles,
            settings=settings,
        )
        register_notification_handlers(bus, context)

        jobs = build_notification_jobs(context)
        scheduler = build_scheduler(jobs, timezone=settings.scheduler_timezone)
        if settings.scheduler_enabled:
            scheduler.start()
        else:
            logger.info("Schedulers disabled by configuration")

        app.state.settings = settings
        app.state.session_factory = session_factory
        app.state.notification_store = store
        app.state.email_service = email
        app.state.sms_service = sms
        app.state.event_bus = bus
        app.state.notification_jobs = jobs
        app.state.scheduler = scheduler
        try:
            yield
        finally:
            scheduler.shutdown()
            await engine.dispose()

    app = FastAPI(title="Portal notifications", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()

"""FastAPI dependency utilities.

Service objects are created once by the application lifespan and stored on
``app.state``; these helpers hand them to the routes.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from portal_notifications.application.notifications import NotificationStore
from portal_notifications.application.schedulers import NotificationJobs, SchedulerRunner
from portal_notifications.domain.entities import User
from portal_notifications.infrastructure.channels import SMSService
from portal_notifications.infrastructure.repositories import UserRepository

ADMIN_ROLES = ("admin", "developer")


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.session_factory


def get_notification_store(request: Request) -> NotificationStore:
    return request.app.state.notification_store


def get_sms_service(request: Request) -> SMSService:
    return request.app.state.sms_service


def get_scheduler(request: Request) -> SchedulerRunner:
    return request.app.state.scheduler


def get_notification_jobs(request: Request) -> NotificationJobs:
    return request.app.state.notification_jobs


def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str:
    """Return the caller id forwarded by the authentication layer."""

    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id.strip()


async def get_current_admin(
    user_id: str = Depends(get_current_user_id),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> User:
    """Ensure the caller is an administrator or developer."""

    async with session_factory() as session:
        user = await UserRepository(session).get(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not any(user.has_role(role) for role in ADMIN_ROLES):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required",
        )
    return user


__all__ = [
    "ADMIN_ROLES",
    "get_current_admin",
    "get_current_user_id",
    "get_notification_jobs",
    "get_notification_store",
    "get_scheduler",
    "get_session_factory",
    "get_sms_service",
]

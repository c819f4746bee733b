"""Operational endpoints to inspect and trigger the periodic jobs."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.encoders import jsonable_encoder

from portal_notifications.application.schedulers import (
    PROFILE_ACTIVATION_JOB,
    UNREAD_MESSAGES_JOB,
    NotificationJobs,
    ScheduledJob,
    SchedulerRunner,
)
from portal_notifications.domain.entities import User
from portal_notifications.domain.errors import JobAlreadyRunning
from portal_notifications.interfaces.api.dependencies import (
    get_current_admin,
    get_notification_jobs,
    get_scheduler,
)
from portal_notifications.interfaces.api.schemas import JobRunResponse, JobStatus

router = APIRouter(prefix="/schedulers", tags=["schedulers"])

ACTIVATION_PHASES = ("all", "deactivate", "reactivate")


def _get_job(scheduler: SchedulerRunner, job_id: str) -> ScheduledJob:
    try:
        return scheduler.get(job_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown job '{job_id}'"
        ) from exc


async def _trigger(job: ScheduledJob, run=None, *args: Any) -> JobRunResponse:
    try:
        result = await job.trigger(run, *args)
    except JobAlreadyRunning as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return JobRunResponse(job=job.job_id, result=jsonable_encoder(result or {}))


@router.get("", response_model=dict[str, JobStatus])
async def list_jobs(
    scheduler: SchedulerRunner = Depends(get_scheduler),
    _: User = Depends(get_current_admin),
) -> dict[str, JobStatus]:
    return {job_id: JobStatus(**state) for job_id, state in scheduler.status().items()}


@router.post("/{job_id}/trigger", response_model=JobRunResponse)
async def trigger_job(
    job_id: str,
    scheduler: SchedulerRunner = Depends(get_scheduler),
    _: User = Depends(get_current_admin),
) -> JobRunResponse:
    return await _trigger(_get_job(scheduler, job_id))


@router.post("/unread-messages/messages/{message_id}/trigger", response_model=JobRunResponse)
async def trigger_message_alert(
    message_id: str,
    scheduler: SchedulerRunner = Depends(get_scheduler),
    jobs: NotificationJobs = Depends(get_notification_jobs),
    _: User = Depends(get_current_admin),
) -> JobRunResponse:
    """Send the unread message alert for one message right away."""

    job = _get_job(scheduler, UNREAD_MESSAGES_JOB)
    return await _trigger(job, jobs.unread_messages.process_message, message_id)


@router.post("/profile-activation/{phase}/trigger", response_model=JobRunResponse)
async def trigger_profile_activation(
    phase: str,
    scheduler: SchedulerRunner = Depends(get_scheduler),
    jobs: NotificationJobs = Depends(get_notification_jobs),
    _: User = Depends(get_current_admin),
) -> JobRunResponse:
    if phase not in ACTIVATION_PHASES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown phase '{phase}'; expected one of {', '.join(ACTIVATION_PHASES)}",
        )
    activation = jobs.profile_activation
    run = {
        "all": activation.manage,
        "deactivate": activation.deactivate,
        "reactivate": activation.reactivate,
    }[phase]
    return await _trigger(_get_job(scheduler, PROFILE_ACTIVATION_JOB), run)


__all__ = ["router"]

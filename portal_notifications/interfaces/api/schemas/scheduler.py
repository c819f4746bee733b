"""Pydantic models for the scheduler administration endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class JobStatus(BaseModel):
    running: bool
    schedule: str
    next_run: datetime | None = None


class JobRunResponse(BaseModel):
    """Result of a manually triggered job run."""

    job: str
    result: dict[str, Any]


__all__ = ["JobRunResponse", "JobStatus"]

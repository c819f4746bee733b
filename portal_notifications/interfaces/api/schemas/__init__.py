"""Pydantic schemas exposed by the API."""

from .notification import MarkReadResponse, NotificationMarkReadRequest, NotificationRead
from .scheduler import JobRunResponse, JobStatus
from .sms import (
    FormatPhoneRequest,
    FormatPhoneResponse,
    SendSMSRequest,
    SendSMSResponse,
    SMSHealth,
)

__all__ = [
    "FormatPhoneRequest",
    "FormatPhoneResponse",
    "JobRunResponse",
    "JobStatus",
    "MarkReadResponse",
    "NotificationMarkReadRequest",
    "NotificationRead",
    "SMSHealth",
    "SendSMSRequest",
    "SendSMSResponse",
]

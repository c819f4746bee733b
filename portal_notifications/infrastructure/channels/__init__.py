"""Outbound delivery channels (email and SMS)."""

from .console import ConsoleEmailProvider, ConsoleSMSProvider
from .email import EmailPayload, EmailProvider, EmailService, build_email_provider
from .phone import format_phone_number, is_valid_phone_number, normalize_phone_number
from .sms import MAX_SMS_LENGTH, SMSPayload, SMSProvider, SMSService, build_sms_provider

__all__ = [
    "ConsoleEmailProvider",
    "ConsoleSMSProvider",
    "EmailPayload",
    "EmailProvider",
    "EmailService",
    "MAX_SMS_LENGTH",
    "SMSPayload",
    "SMSProvider",
    "SMSService",
    "build_email_provider",
    "build_sms_provider",
    "format_phone_number",
    "is_valid_phone_number",
    "normalize_phone_number",
]

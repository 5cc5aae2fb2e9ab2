"""Pydantic models and table definitions for Layback Garments data entities."""

from .application import JobApplicationCreate, JobApplicationResult
from .enums import PaymentProvider, PaymentStatus, ReconcileOutcome, UserRole
from .errors import (
    ApiError,
    ErrorCode,
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    ToolError,
)
from .user import UserCreate, UserResult
from .webhook import (
    IgnoredEvent,
    NormalizedEvent,
    PaystackEvent,
    StripeEvent,
    WebhookAck,
    WebhookOutcome,
)

__all__ = [
    # Enums
    "PaymentProvider",
    "PaymentStatus",
    "ReconcileOutcome",
    "UserRole",
    # Errors
    "ApiError",
    "ErrorCode",
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
    "ToolError",
    # Webhooks
    "IgnoredEvent",
    "NormalizedEvent",
    "PaystackEvent",
    "StripeEvent",
    "WebhookAck",
    "WebhookOutcome",
    # Applications
    "JobApplicationCreate",
    "JobApplicationResult",
    # Users
    "UserCreate",
    "UserResult",
]

"""Backend services for Layback Garments."""

from .application_service import JobApplicationService
from .database import (
    DatabaseService,
    DatabaseServiceError,
    IntegrityViolationError,
    StoreUnavailableError,
)
from .normalizer import MalformedPayloadError, normalize, parse_payload
from .reconciler import OrderPaymentReconciler
from .signature import WebhookSignatureError, verify
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .user_service import UserService
from .webhook_handler import WebhookHandler, WebhookProcessingError

__all__ = [
    "DatabaseService",
    "DatabaseServiceError",
    "IntegrityViolationError",
    "StoreUnavailableError",
    "JobApplicationService",
    "MalformedPayloadError",
    "normalize",
    "parse_payload",
    "OrderPaymentReconciler",
    "WebhookSignatureError",
    "verify",
    "SSMService",
    "SSMServiceError",
    "get_ssm_service",
    "UserService",
    "WebhookHandler",
    "WebhookProcessingError",
]

"""Webhook handler for Paystack and Stripe payment events.

Holds the business logic of the webhook endpoints, separate from HTTP
routing, so it can be unit tested without a client:

    verify signature -> parse JSON -> normalize -> reconcile order

Verification always happens before the body is parsed. Failures are raised
as exceptions the route maps to status codes:

- WebhookSignatureError  -> 400, nothing written
- MalformedPayloadError  -> 400, nothing written
- WebhookProcessingError -> 503, the provider redelivers the event

The handler keeps no state between requests. Durability of a payment
confirmation that fails to apply relies on the provider's redelivery, so
each failure is logged with provider, event kind, order id and provider
reference for manual follow-up.
"""

from typing import TYPE_CHECKING

from shared.models.enums import PaymentProvider, PaymentStatus, ReconcileOutcome
from shared.models.webhook import IgnoredEvent, WebhookOutcome
from shared.services.normalizer import MalformedPayloadError, normalize, parse_payload
from shared.services.reconciler import OrderPaymentReconciler
from shared.services.signature import (
    DEFAULT_STRIPE_TOLERANCE,
    WebhookSignatureError,
    check_paystack_signature,
    check_stripe_signature,
)
from shared.utils.logging import get_logger, log_webhook_event

if TYPE_CHECKING:
    from shared.config import Settings
    from shared.services.database import DatabaseService

logger = get_logger(__name__)


class WebhookProcessingError(Exception):
    """A verified payment event could not be applied and must be redelivered."""

    def __init__(self, outcome: WebhookOutcome) -> None:
        super().__init__(
            f"{outcome.provider.value} {outcome.event_kind} for order {outcome.order_id} "
            "could not be applied"
        )
        self.outcome = outcome


class WebhookHandler:
    """Processes raw webhook deliveries from both payment providers."""

    def __init__(
        self,
        reconciler: OrderPaymentReconciler,
        *,
        paystack_secret: str,
        stripe_webhook_secret: str,
        stripe_tolerance: int = DEFAULT_STRIPE_TOLERANCE,
    ) -> None:
        """Initialize webhook handler.

        Args:
            reconciler: Applies payment status to orders
            paystack_secret: Paystack secret key (signs webhook bodies)
            stripe_webhook_secret: Stripe endpoint signing secret (whsec_...)
            stripe_tolerance: Maximum age in seconds of a Stripe signature
        """
        self._reconciler = reconciler
        self._paystack_secret = paystack_secret
        self._stripe_webhook_secret = stripe_webhook_secret
        self._stripe_tolerance = stripe_tolerance

    @classmethod
    def from_settings(cls, settings: "Settings", db: "DatabaseService") -> "WebhookHandler":
        return cls(
            OrderPaymentReconciler(db),
            paystack_secret=settings.paystack_secret_key.get_secret_value(),
            stripe_webhook_secret=settings.stripe_webhook_secret.get_secret_value(),
            stripe_tolerance=settings.stripe_webhook_tolerance,
        )

    def _verify(self, provider: PaymentProvider, raw_body: bytes, signature: str | None) -> None:
        try:
            if provider is PaymentProvider.PAYSTACK:
                check_paystack_signature(raw_body, signature, self._paystack_secret)
            else:
                check_stripe_signature(
                    raw_body,
                    signature,
                    self._stripe_webhook_secret,
                    self._stripe_tolerance,
                )
        except WebhookSignatureError as e:
            log_webhook_event(
                logger,
                provider.value,
                None,
                result="rejected",
                error=e.message,
                body_bytes=len(raw_body),
            )
            raise

    def handle(
        self,
        provider: PaymentProvider,
        raw_body: bytes,
        signature: str | None,
    ) -> WebhookOutcome:
        """Verify, parse and apply one webhook delivery.

        Args:
            provider: Provider the endpoint belongs to
            raw_body: Request body exactly as received
            signature: Value of the provider's signature header

        Returns:
            WebhookOutcome for an acknowledged event.

        Raises:
            WebhookSignatureError: Signature missing or invalid.
            MalformedPayloadError: Verified body is not a JSON object.
            WebhookProcessingError: The order update failed transiently.
        """
        self._verify(provider, raw_body, signature)

        try:
            payload = parse_payload(raw_body)
        except MalformedPayloadError as e:
            log_webhook_event(logger, provider.value, None, result="malformed", error=str(e))
            raise

        event = normalize(provider, payload)
        if isinstance(event, IgnoredEvent):
            log_webhook_event(
                logger,
                provider.value,
                event.event_kind,
                result="ignored",
                reason=event.reason,
            )
            return WebhookOutcome(
                provider=provider,
                event_kind=event.event_kind,
                result="ignored",
            )

        log_webhook_event(
            logger,
            provider.value,
            event.event_kind,
            order_id=event.order_id,
            reference=event.reference,
            result="received",
            amount=event.amount,
            currency=event.currency,
        )

        outcome = self._reconciler.reconcile(event.order_id, PaymentStatus.PAID)
        result = WebhookOutcome(
            provider=provider,
            event_kind=event.event_kind,
            order_id=event.order_id,
            reference=event.reference,
            result=outcome.value,
        )
        log_webhook_event(
            logger,
            provider.value,
            event.event_kind,
            order_id=event.order_id,
            reference=event.reference,
            result=outcome.value,
        )

        if outcome is ReconcileOutcome.TRANSIENT_FAILURE:
            raise WebhookProcessingError(result)
        return result

"""Webhook signature verification for Paystack and Stripe.

Signatures are always checked against the raw request bytes. Re-serializing
parsed JSON changes whitespace and key order and would never match.

Paystack:
    x-paystack-signature = hex(HMAC-SHA512(secret_key, raw_body))

Stripe:
    Stripe-Signature = "t=<unix ts>,v1=<hex(HMAC-SHA256(webhook_secret, f"{t}.{raw_body}"))>"
    Verified by the stripe library, which also rejects timestamps outside
    the tolerance window.

Digest comparisons are constant time (hmac.compare_digest here, and inside
the stripe library).
"""

import hashlib
import hmac

import stripe

from shared.models.enums import PaymentProvider
from shared.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_STRIPE_TOLERANCE = 300


class WebhookSignatureError(Exception):
    """Raised when a webhook signature is missing or does not match."""

    def __init__(self, provider: PaymentProvider, message: str) -> None:
        super().__init__(message)
        self.provider = provider
        self.message = message


def compute_paystack_signature(raw_body: bytes, secret: str) -> str:
    """Return the hex HMAC-SHA512 Paystack sends for a body."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()


def check_paystack_signature(raw_body: bytes, signature: str | None, secret: str) -> None:
    """Verify a Paystack webhook signature.

    Raises:
        WebhookSignatureError: If the header is missing or does not match.
    """
    if not signature:
        raise WebhookSignatureError(PaymentProvider.PAYSTACK, "Missing signature")

    expected = compute_paystack_signature(raw_body, secret)
    if not hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("utf-8")):
        raise WebhookSignatureError(PaymentProvider.PAYSTACK, "Invalid signature")


def check_stripe_signature(
    raw_body: bytes,
    signature: str | None,
    secret: str,
    tolerance: int = DEFAULT_STRIPE_TOLERANCE,
) -> None:
    """Verify a Stripe-Signature header.

    Raises:
        WebhookSignatureError: If the header is missing, malformed, does not
            match, or carries a timestamp outside the tolerance window.
    """
    if not signature:
        raise WebhookSignatureError(PaymentProvider.STRIPE, "No stripe-signature header value was provided.")

    # The signed payload is "<t>.<body>" as text; older stripe releases
    # format bytes as "b'...'" instead of decoding them.
    try:
        payload = raw_body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise WebhookSignatureError(PaymentProvider.STRIPE, "Payload is not valid UTF-8") from e

    try:
        stripe.WebhookSignature.verify_header(payload, signature, secret, tolerance)
    except stripe.SignatureVerificationError as e:
        raise WebhookSignatureError(PaymentProvider.STRIPE, str(e.user_message or e)) from e


def verify(
    provider: PaymentProvider,
    raw_body: bytes,
    signature: str | None,
    secret: str,
    *,
    tolerance: int = DEFAULT_STRIPE_TOLERANCE,
) -> bool:
    """Return True if the signature authenticates raw_body for the provider."""
    try:
        if provider is PaymentProvider.PAYSTACK:
            check_paystack_signature(raw_body, signature, secret)
        else:
            check_stripe_signature(raw_body, signature, secret, tolerance)
    except WebhookSignatureError as e:
        logger.debug("%s signature rejected: %s", provider.value, e.message)
        return False
    return True

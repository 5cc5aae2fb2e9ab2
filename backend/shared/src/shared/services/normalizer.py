"""Turn verified provider payloads into normalized payment events.

Only call these functions on bodies whose signature has already been
verified.

Recognised events:
- Paystack ``charge.success``: order id from ``data.metadata.custom_fields``
  entry with ``variable_name == "order_id"``
- Stripe ``payment_intent.succeeded``: order id from
  ``data.object.metadata.orderId``

Every other event kind, and a recognised event without a usable order id,
normalizes to IgnoredEvent.
"""

import json
from typing import Any

from shared.models.enums import PaymentProvider
from shared.models.webhook import IgnoredEvent, PaystackEvent, StripeEvent
from shared.utils.logging import get_logger

logger = get_logger(__name__)

PAYSTACK_PAYMENT_SUCCEEDED = "charge.success"
STRIPE_PAYMENT_SUCCEEDED = "payment_intent.succeeded"

PAYSTACK_ORDER_FIELD = "order_id"
STRIPE_ORDER_FIELD = "orderId"


class MalformedPayloadError(Exception):
    """Raised when a webhook body is not a JSON object."""


def parse_payload(raw_body: bytes) -> dict[str, Any]:
    """Decode a webhook body.

    Raises:
        MalformedPayloadError: If the body is not UTF-8 JSON or its top level
            is not an object.
    """
    try:
        payload = json.loads(raw_body)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedPayloadError(f"Invalid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedPayloadError("Invalid JSON: expected an object")
    return payload


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_order_id(value: Any) -> int | None:
    """Coerce a metadata value to a positive order id."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        order_id = value
    elif isinstance(value, str) and value.strip().isdecimal():
        order_id = int(value.strip())
    else:
        return None
    return order_id if order_id > 0 else None


def _optional_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None


def _optional_str(value: Any) -> str | None:
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return str(value)
    return None


def _ignore(provider: PaymentProvider, event_kind: Any, reason: str) -> IgnoredEvent:
    return IgnoredEvent(
        provider=provider,
        event_kind=event_kind if isinstance(event_kind, str) else None,
        reason=reason,
    )


def _normalize_paystack(payload: dict[str, Any]) -> PaystackEvent | IgnoredEvent:
    event_kind = payload.get("event")
    if event_kind != PAYSTACK_PAYMENT_SUCCEEDED:
        return _ignore(PaymentProvider.PAYSTACK, event_kind, "unhandled event kind")

    data = _as_dict(payload.get("data"))
    custom_fields = _as_dict(data.get("metadata")).get("custom_fields")
    raw_order_id = None
    if isinstance(custom_fields, list):
        for field in custom_fields:
            if isinstance(field, dict) and field.get("variable_name") == PAYSTACK_ORDER_FIELD:
                raw_order_id = field.get("value")
                break

    order_id = _parse_order_id(raw_order_id)
    reference = _optional_str(data.get("reference"))
    if order_id is None:
        logger.warning(
            "paystack %s without usable order_id (value=%r, reference=%s)",
            event_kind,
            raw_order_id,
            reference,
        )
        return _ignore(PaymentProvider.PAYSTACK, event_kind, "missing or invalid order_id")

    return PaystackEvent(
        event_kind=event_kind,
        order_id=order_id,
        amount=_optional_int(data.get("amount")),
        currency=_optional_str(data.get("currency")),
        reference=reference,
    )


def _normalize_stripe(payload: dict[str, Any]) -> StripeEvent | IgnoredEvent:
    event_kind = payload.get("type")
    if event_kind != STRIPE_PAYMENT_SUCCEEDED:
        return _ignore(PaymentProvider.STRIPE, event_kind, "unhandled event kind")

    intent = _as_dict(_as_dict(payload.get("data")).get("object"))
    raw_order_id = _as_dict(intent.get("metadata")).get(STRIPE_ORDER_FIELD)
    order_id = _parse_order_id(raw_order_id)
    reference = _optional_str(payload.get("id"))
    if order_id is None:
        logger.warning(
            "stripe %s without usable orderId (value=%r, event=%s)",
            event_kind,
            raw_order_id,
            reference,
        )
        return _ignore(PaymentProvider.STRIPE, event_kind, "missing or invalid orderId")

    return StripeEvent(
        event_kind=event_kind,
        order_id=order_id,
        amount=_optional_int(intent.get("amount_received")),
        currency=_optional_str(intent.get("currency")),
        reference=reference,
    )


def normalize(
    provider: PaymentProvider,
    payload: dict[str, Any],
) -> PaystackEvent | StripeEvent | IgnoredEvent:
    """Reduce a parsed provider payload to a normalized event.

    Args:
        provider: Provider that sent the webhook
        payload: Parsed JSON body

    Returns:
        PaystackEvent or StripeEvent for a payment that should mark an order
        paid, IgnoredEvent for anything else.
    """
    if provider is PaymentProvider.PAYSTACK:
        return _normalize_paystack(payload)
    return _normalize_stripe(payload)

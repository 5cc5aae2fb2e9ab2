"""Unit tests for WebhookHandler.

Tests verify the verify -> parse -> normalize -> reconcile pipeline
against an in-memory store, without an HTTP client.

Test categories:
- Signature failures never reach the parser or the store
- Recognised events update the order; others are acknowledged
- Transient store failures raise WebhookProcessingError
"""

import hashlib
import hmac
import json
import logging
import time
from typing import Any
from unittest.mock import MagicMock

import pytest

from shared.models.enums import PaymentProvider, PaymentStatus, ReconcileOutcome
from shared.services.normalizer import MalformedPayloadError
from shared.services.reconciler import OrderPaymentReconciler
from shared.services.signature import WebhookSignatureError
from shared.services.webhook_handler import WebhookHandler, WebhookProcessingError


# === Helper Functions ===


def _paystack_signature(payload: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha512).hexdigest()


def _stripe_signature(payload: bytes, secret: str, timestamp: int | None = None) -> str:
    ts = str(timestamp if timestamp is not None else int(time.time()))
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{ts}.{payload.decode('utf-8')}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={ts},v1={signature}"


def _charge_success(order_id: Any = "42") -> bytes:
    return json.dumps(
        {
            "event": "charge.success",
            "data": {
                "reference": "T123456789",
                "amount": 500000,
                "currency": "NGN",
                "metadata": {
                    "custom_fields": [{"variable_name": "order_id", "value": order_id}],
                },
            },
        }
    ).encode("utf-8")


def _payment_intent_succeeded(order_id: Any = "42", event_type: str = "payment_intent.succeeded") -> bytes:
    return json.dumps(
        {
            "id": "evt_1ABC123DEF456",
            "type": event_type,
            "data": {
                "object": {
                    "id": "pi_3ABC123DEF456",
                    "amount_received": 2500,
                    "currency": "usd",
                    "metadata": {"orderId": order_id},
                },
            },
        }
    ).encode("utf-8")


# === Test Fixtures ===


@pytest.fixture
def handler(settings, database, seeded_orders) -> WebhookHandler:
    return WebhookHandler.from_settings(settings, database)


@pytest.fixture
def mock_reconciler() -> MagicMock:
    reconciler = MagicMock(spec=OrderPaymentReconciler)
    reconciler.reconcile.return_value = ReconcileOutcome.UPDATED
    return reconciler


@pytest.fixture
def mocked_handler(mock_reconciler, paystack_secret, stripe_webhook_secret) -> WebhookHandler:
    return WebhookHandler(
        mock_reconciler,
        paystack_secret=paystack_secret,
        stripe_webhook_secret=stripe_webhook_secret,
    )


# === Paystack ===


class TestPaystackDelivery:
    def test_charge_success_updates_order(self, handler, paystack_secret, order_status) -> None:
        body = _charge_success()

        outcome = handler.handle(PaymentProvider.PAYSTACK, body, _paystack_signature(body, paystack_secret))

        assert outcome.result == "updated"
        assert outcome.order_id == 42
        assert outcome.reference == "T123456789"
        assert order_status(42) == "Paid"

    def test_replay_acknowledged(self, handler, paystack_secret, order_status) -> None:
        body = _charge_success()
        signature = _paystack_signature(body, paystack_secret)

        handler.handle(PaymentProvider.PAYSTACK, body, signature)
        outcome = handler.handle(PaymentProvider.PAYSTACK, body, signature)

        assert outcome.result == "already_at_status"
        assert order_status(42) == "Paid"

    def test_unknown_order(self, handler, paystack_secret, order_status) -> None:
        body = _charge_success(order_id="999")

        outcome = handler.handle(PaymentProvider.PAYSTACK, body, _paystack_signature(body, paystack_secret))

        assert outcome.result == "order_not_found"
        assert order_status(999) is None

    def test_missing_signature(self, mocked_handler, mock_reconciler) -> None:
        with pytest.raises(WebhookSignatureError, match="Missing signature"):
            mocked_handler.handle(PaymentProvider.PAYSTACK, _charge_success(), None)

        mock_reconciler.reconcile.assert_not_called()

    def test_invalid_signature(self, mocked_handler, mock_reconciler) -> None:
        body = _charge_success()

        with pytest.raises(WebhookSignatureError, match="Invalid signature"):
            mocked_handler.handle(PaymentProvider.PAYSTACK, body, _paystack_signature(body, "wrong"))

        mock_reconciler.reconcile.assert_not_called()

    def test_tampered_body(self, handler, paystack_secret, order_status) -> None:
        signature = _paystack_signature(_charge_success("43"), paystack_secret)

        with pytest.raises(WebhookSignatureError):
            handler.handle(PaymentProvider.PAYSTACK, _charge_success("42"), signature)

        assert order_status(42) == "Unpaid"

    def test_stripe_signature_not_accepted(self, mocked_handler, stripe_webhook_secret) -> None:
        body = _charge_success()

        with pytest.raises(WebhookSignatureError):
            mocked_handler.handle(
                PaymentProvider.PAYSTACK, body, _stripe_signature(body, stripe_webhook_secret)
            )

    def test_signed_non_json(self, mocked_handler, mock_reconciler, paystack_secret) -> None:
        body = b"not json at all"

        with pytest.raises(MalformedPayloadError):
            mocked_handler.handle(PaymentProvider.PAYSTACK, body, _paystack_signature(body, paystack_secret))

        mock_reconciler.reconcile.assert_not_called()

    def test_ignored_event(self, mocked_handler, mock_reconciler, paystack_secret) -> None:
        body = json.dumps({"event": "transfer.success", "data": {}}).encode()

        outcome = mocked_handler.handle(
            PaymentProvider.PAYSTACK, body, _paystack_signature(body, paystack_secret)
        )

        assert outcome.result == "ignored"
        assert outcome.event_kind == "transfer.success"
        assert outcome.order_id is None
        mock_reconciler.reconcile.assert_not_called()

    def test_reconciles_to_paid(self, mocked_handler, mock_reconciler, paystack_secret) -> None:
        body = _charge_success(order_id=42)

        mocked_handler.handle(PaymentProvider.PAYSTACK, body, _paystack_signature(body, paystack_secret))

        mock_reconciler.reconcile.assert_called_once_with(42, PaymentStatus.PAID)


# === Stripe ===


class TestStripeDelivery:
    def test_payment_intent_succeeded(self, handler, stripe_webhook_secret, order_status) -> None:
        body = _payment_intent_succeeded()

        outcome = handler.handle(
            PaymentProvider.STRIPE, body, _stripe_signature(body, stripe_webhook_secret)
        )

        assert outcome.result == "updated"
        assert outcome.reference == "evt_1ABC123DEF456"
        assert order_status(42) == "Paid"

    def test_after_paystack_stays_paid(
        self, handler, paystack_secret, stripe_webhook_secret, order_status
    ) -> None:
        paystack_body = _charge_success()
        handler.handle(
            PaymentProvider.PAYSTACK, paystack_body, _paystack_signature(paystack_body, paystack_secret)
        )

        body = _payment_intent_succeeded()
        outcome = handler.handle(
            PaymentProvider.STRIPE, body, _stripe_signature(body, stripe_webhook_secret)
        )

        assert outcome.result == "already_at_status"
        assert order_status(42) == "Paid"

    def test_expired_signature(self, mocked_handler, mock_reconciler, stripe_webhook_secret) -> None:
        body = _payment_intent_succeeded()
        header = _stripe_signature(body, stripe_webhook_secret, timestamp=int(time.time()) - 3600)

        with pytest.raises(WebhookSignatureError):
            mocked_handler.handle(PaymentProvider.STRIPE, body, header)

        mock_reconciler.reconcile.assert_not_called()

    def test_paystack_signature_not_accepted(self, mocked_handler, paystack_secret) -> None:
        body = _payment_intent_succeeded()

        with pytest.raises(WebhookSignatureError):
            mocked_handler.handle(PaymentProvider.STRIPE, body, _paystack_signature(body, paystack_secret))

    def test_unhandled_type_ignored(self, mocked_handler, mock_reconciler, stripe_webhook_secret) -> None:
        body = _payment_intent_succeeded(event_type="payment_intent.created")

        outcome = mocked_handler.handle(
            PaymentProvider.STRIPE, body, _stripe_signature(body, stripe_webhook_secret)
        )

        assert outcome.result == "ignored"
        mock_reconciler.reconcile.assert_not_called()


# === Failures ===


class TestProcessingFailures:
    def test_transient_failure_raises(
        self, mocked_handler, mock_reconciler, paystack_secret
    ) -> None:
        mock_reconciler.reconcile.return_value = ReconcileOutcome.TRANSIENT_FAILURE
        body = _charge_success()

        with pytest.raises(WebhookProcessingError) as exc_info:
            mocked_handler.handle(
                PaymentProvider.PAYSTACK, body, _paystack_signature(body, paystack_secret)
            )

        outcome = exc_info.value.outcome
        assert outcome.result == "transient_failure"
        assert outcome.order_id == 42
        assert outcome.reference == "T123456789"

    def test_transient_failure_logged_with_context(
        self, mocked_handler, mock_reconciler, paystack_secret, caplog
    ) -> None:
        mock_reconciler.reconcile.return_value = ReconcileOutcome.TRANSIENT_FAILURE
        body = _charge_success()

        with caplog.at_level(logging.INFO, logger="shared.services.webhook_handler"):
            with pytest.raises(WebhookProcessingError):
                mocked_handler.handle(
                    PaymentProvider.PAYSTACK, body, _paystack_signature(body, paystack_secret)
                )

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors
        context = errors[-1].webhook
        assert context["provider"] == "paystack"
        assert context["event_kind"] == "charge.success"
        assert context["order_id"] == 42
        assert context["reference"] == "T123456789"
        assert context["result"] == "transient_failure"

    def test_rejection_logged(self, mocked_handler, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="shared.services.webhook_handler"):
            with pytest.raises(WebhookSignatureError):
                mocked_handler.handle(PaymentProvider.STRIPE, b"{}", "t=1,v1=bad")

        assert any(getattr(r, "webhook", {}).get("result") == "rejected" for r in caplog.records)

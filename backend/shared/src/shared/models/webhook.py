"""Normalized payment webhook events.

Each provider's envelope is reduced to one of a closed set of variants
discriminated by ``provider``. Events the system does not act on are
represented explicitly by ``IgnoredEvent`` rather than by an empty result.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import PaymentProvider


class _PaymentSucceededEvent(BaseModel):
    """Fields common to every recognised "payment succeeded" event."""

    model_config = ConfigDict(frozen=True)

    event_kind: str = Field(..., description="Provider event type")
    order_id: int = Field(..., gt=0, description="Order being paid for")
    amount: int | None = Field(
        default=None,
        ge=0,
        description="Amount paid in minor currency units, if reported",
    )
    currency: str | None = Field(default=None, description="ISO currency code")
    reference: str | None = Field(
        default=None,
        description="Provider reference used to trace the payment by hand",
    )


class PaystackEvent(_PaymentSucceededEvent):
    """A verified Paystack ``charge.success`` event."""

    provider: Literal[PaymentProvider.PAYSTACK] = PaymentProvider.PAYSTACK


class StripeEvent(_PaymentSucceededEvent):
    """A verified Stripe ``payment_intent.succeeded`` event."""

    provider: Literal[PaymentProvider.STRIPE] = PaymentProvider.STRIPE


NormalizedEvent = Annotated[
    Union[PaystackEvent, StripeEvent],
    Field(discriminator="provider"),
]


class IgnoredEvent(BaseModel):
    """A verified event that is acknowledged without touching any order."""

    model_config = ConfigDict(frozen=True)

    provider: PaymentProvider
    event_kind: str | None = None
    reason: str


class WebhookAck(BaseModel):
    """Acknowledgement body returned to payment providers."""

    received: bool = True


class WebhookOutcome(BaseModel):
    """How an accepted webhook was handled, for logging and tests."""

    model_config = ConfigDict(frozen=True)

    provider: PaymentProvider
    event_kind: str | None = None
    order_id: int | None = None
    reference: str | None = None
    result: str = Field(
        ...,
        description="ignored, updated, already_at_status or order_not_found",
    )

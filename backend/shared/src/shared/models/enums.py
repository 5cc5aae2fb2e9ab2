"""Enumeration types for Layback Garments data models."""

from enum import Enum


class PaymentProvider(str, Enum):
    """Payment gateways that deliver webhooks."""

    PAYSTACK = "paystack"
    STRIPE = "stripe"


class PaymentStatus(str, Enum):
    """Payment status of an order.

    Values match the strings stored in the Orders.PaymentStatus column.
    """

    UNPAID = "Unpaid"
    PAID = "Paid"


class ReconcileOutcome(str, Enum):
    """Result of applying a payment status to an order."""

    UPDATED = "updated"
    ALREADY_AT_STATUS = "already_at_status"
    ORDER_NOT_FOUND = "order_not_found"
    TRANSIENT_FAILURE = "transient_failure"


class UserRole(str, Enum):
    """Role assigned to a registered user."""

    CUSTOMER = "Customer"
    ADMIN = "Admin"

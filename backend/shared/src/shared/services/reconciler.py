"""Apply confirmed payments to orders.

The update is idempotent by value: it only touches the row when the status
actually changes, so replays and concurrent duplicate webhooks from either
provider converge on the same final state without locks.

When no row changes, a single follow-up read tells "already paid" apart
from "no such order". Both are acknowledged; the distinction only sharpens
the logs.
"""


from sqlalchemy import or_, select, update

from shared.models.enums import PaymentStatus, ReconcileOutcome
from shared.models.tables import orders
from shared.services.database import DatabaseService, DatabaseServiceError
from shared.utils.logging import get_logger

logger = get_logger(__name__)


class OrderPaymentReconciler:
    """Sets Orders.PaymentStatus in response to payment events."""

    def __init__(self, db: DatabaseService) -> None:
        self._db = db

    def reconcile(
        self,
        order_id: int,
        new_status: PaymentStatus = PaymentStatus.PAID,
    ) -> ReconcileOutcome:
        """Move an order to new_status.

        The write is committed before UPDATED is returned. Any store error is
        reported as TRANSIENT_FAILURE; nothing is written in that case.

        Args:
            order_id: Order to update
            new_status: Target payment status

        Returns:
            UPDATED, ALREADY_AT_STATUS, ORDER_NOT_FOUND or TRANSIENT_FAILURE
        """
        status_column = orders.c.PaymentStatus
        statement = (
            update(orders)
            .where(orders.c.OrderID == order_id)
            .where(or_(status_column.is_(None), status_column != new_status.value))
            .values(PaymentStatus=new_status.value)
        )

        try:
            affected = self._db.execute(statement)
            if affected:
                logger.info("Order %s payment status set to %s", order_id, new_status.value)
                return ReconcileOutcome.UPDATED

            row = self._db.fetch_one(
                select(orders.c.PaymentStatus).where(orders.c.OrderID == order_id)
            )
        except DatabaseServiceError as e:
            logger.error(
                "Failed to set order %s payment status to %s: %s",
                order_id,
                new_status.value,
                e,
            )
            return ReconcileOutcome.TRANSIENT_FAILURE

        if row is None:
            logger.warning("Order %s not found; payment status not changed", order_id)
            return ReconcileOutcome.ORDER_NOT_FOUND

        logger.info("Order %s already %s", order_id, new_status.value)
        return ReconcileOutcome.ALREADY_AT_STATUS

"""
PaymentRepository for database operations on Payment model
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from database_models import Payment, generate_id

STATUS_PENDING = "pending"
STATUS_SUCCEEDED = "succeeded"


class PaymentRepository:
    """Repository class for Payment database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_gateway_id(self, payment_id: str) -> Optional[Payment]:
        """
        Retrieve a payment by the identifier the gateway assigned to it.

        Args:
            payment_id: Gateway payment identifier

        Returns:
            Payment object if found, None otherwise
        """
        result = await self.db.execute(
            select(Payment).where(Payment.payment_id == payment_id)
        )
        return result.scalar_one_or_none()

    async def create_payment(self, payment_data: dict) -> Payment:
        """
        Create a pending payment.

        Args:
            payment_data: Dictionary containing payment data. Must include:
                - user_id: str
                - amount: float
                - description: str
                Optional:
                - payment_id: str (gateway id; defaults to the local record id)
                - currency: str (defaults to "RUB")

        Returns:
            Created Payment object
        """
        record_id = generate_id()
        payment = Payment(
            id=record_id,
            user_id=payment_data["user_id"],
            amount=payment_data["amount"],
            currency=payment_data.get("currency", "RUB"),
            status=STATUS_PENDING,
            payment_id=payment_data.get("payment_id") or record_id,
            description=payment_data.get("description"),
        )
        self.db.add(payment)
        await self.db.flush()
        await self.db.refresh(payment)
        return payment

    async def mark_succeeded_if_pending(self, payment_id: str) -> bool:
        """
        Move a payment from pending to succeeded in a single conditional UPDATE.

        Args:
            payment_id: Gateway payment identifier

        Returns:
            True only for the caller whose update changed the row; a
            concurrent or repeated delivery gets False
        """
        result = await self.db.execute(
            update(Payment)
            .where(Payment.payment_id == payment_id, Payment.status == STATUS_PENDING)
            .values(status=STATUS_SUCCEEDED)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

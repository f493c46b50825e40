from typing import Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from shared.errors import DuplicateOrderId, InvalidRequest
from shared.observability import webpay_status_transitions_total

from .models import PENDING, TERMINAL_STATUSES, Payment

logger = structlog.get_logger(__name__)


class PaymentRepository:

    @staticmethod
    async def create(db: AsyncSession, payment: Payment) -> Payment:
        if await PaymentRepository.get_by_order_id(db, payment.order_id):
            raise DuplicateOrderId()

        db.add(payment)
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race with another insert for the same order id
            await db.rollback()
            raise DuplicateOrderId()
        await db.refresh(payment)
        return payment

    @staticmethod
    async def get_by_id(db: AsyncSession, payment_id: str) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.id == payment_id)
        result = await db.execute(stmt.execution_options(populate_existing=True))
        return result.scalars().first()

    @staticmethod
    async def get_by_order_id(db: AsyncSession, order_id: str) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.order_id == order_id)
        result = await db.execute(stmt.execution_options(populate_existing=True))
        return result.scalars().first()

    @staticmethod
    async def set_status_by_id(db: AsyncSession, payment_id: str, status: str) -> Optional[Payment]:
        await PaymentRepository._transition(db, Payment.id == payment_id, status)
        return await PaymentRepository.get_by_id(db, payment_id)

    @staticmethod
    async def set_status_by_order_id(db: AsyncSession, order_id: str, status: str) -> Optional[Payment]:
        await PaymentRepository._transition(db, Payment.order_id == order_id, status)
        return await PaymentRepository.get_by_order_id(db, order_id)

    @staticmethod
    async def _transition(db: AsyncSession, criterion, status: str) -> bool:
        """
        Moves a pending payment to a terminal status.

        The status guard lives in the UPDATE itself, so two racing callbacks
        for the same record resolve to whichever commits first and the other
        matches zero rows. Payments already in a terminal state are left alone.
        """
        if status not in TERMINAL_STATUSES:
            raise InvalidRequest(f"Unsupported payment status: {status}")

        stmt = (
            update(Payment)
            .where(criterion, Payment.status == PENDING)
            .values(status=status, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()

        changed = result.rowcount > 0
        if changed:
            webpay_status_transitions_total.labels(status=status).inc()
            logger.info("payment_status_changed", status=status)
        return changed

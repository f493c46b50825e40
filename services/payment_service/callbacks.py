"""
Gateway notify-callback handling.

The gateway calls back with nothing but the order number to tie the message
to a local session, and it retries until it gets a 200. Unknown or stale
order numbers are therefore logged and acknowledged instead of failed.
"""
from typing import Any, Mapping

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import settings
from shared.errors import ConfigurationError, InvalidRequest
from shared.observability import webpay_callbacks_total

from .models import FAILED, SUCCESS
from .repository import PaymentRepository
from .signature import CALLBACK_SIGNATURE_FIELDS, verify_signature

logger = structlog.get_logger(__name__)

ACKNOWLEDGEMENT = "OK"
SUCCESS_OUTCOMES = frozenset({"success", "approved"})


def map_outcome(value: Any) -> str:
    """Only an explicit success indicator counts as paid."""
    if isinstance(value, str) and value.strip().lower() in SUCCESS_OUTCOMES:
        return SUCCESS
    return FAILED


class CallbackReconciler:

    @staticmethod
    def _check_signature(payload: Mapping[str, Any]) -> None:
        if not settings.webpay_verify_callback:
            return
        if not settings.webpay_secret_key:
            # An empty key would let anyone compute a valid signature
            logger.error("callback_verification_unconfigured", order_id=payload.get("wsb_order_num"))
            raise ConfigurationError("WebPay credentials not configured")
        if not verify_signature(
            payload,
            payload.get("wsb_signature"),
            settings.webpay_secret_key,
            CALLBACK_SIGNATURE_FIELDS,
        ):
            webpay_callbacks_total.labels(outcome="rejected").inc()
            logger.warning("callback_signature_invalid", order_id=payload.get("wsb_order_num"))
            raise InvalidRequest("Invalid callback signature")

    @staticmethod
    async def handle_callback(db: AsyncSession, payload: Mapping[str, Any]) -> str:
        order_id = payload.get("wsb_order_num")
        if order_id is None or str(order_id).strip() == "":
            raise InvalidRequest("Order number is required")
        order_id = str(order_id)

        CallbackReconciler._check_signature(payload)

        outcome = map_outcome(payload.get("wsb_status"))
        log = logger.bind(
            order_id=order_id,
            transaction_id=payload.get("wsb_tid"),
            gateway_status=payload.get("wsb_status"),
        )

        payment = await PaymentRepository.set_status_by_order_id(db, order_id, outcome)
        if payment is None:
            webpay_callbacks_total.labels(outcome="unknown_order").inc()
            log.warning("callback_for_unknown_order")
            return ACKNOWLEDGEMENT

        webpay_callbacks_total.labels(outcome=outcome).inc()
        log.info("callback_processed", payment_id=payment.id, status=payment.status)
        return ACKNOWLEDGEMENT

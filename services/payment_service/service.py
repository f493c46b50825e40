import secrets
import uuid
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import settings
from shared.errors import ConfigurationError, InvalidRequest, NotFound
from shared.observability import webpay_payment_sessions_created_total

from .models import PENDING, SUCCESS, Payment
from .repository import PaymentRepository
from .schemas import GatewayForm, PaymentCreate, PaymentCreateResponse
from .signature import generate_signature

logger = structlog.get_logger(__name__)

# ISO 4217 numeric codes accepted by the gateway
CURRENCY_CODES = {
    "BYN": "933",
    "USD": "840",
    "EUR": "978",
    "RUB": "643",
}

DESCRIPTION_MAX_LENGTH = 255
CENTS = Decimal("0.01")
# Numeric(10, 2) column limit
MAX_AMOUNT = Decimal("100000000")


def normalize_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise InvalidRequest("Amount must be a number")
    if value.is_nan():
        raise InvalidRequest("Amount must be a number")
    if value <= 0:
        raise InvalidRequest("Amount must be positive")
    if value >= MAX_AMOUNT:
        raise InvalidRequest("Amount is too large")
    value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    return value


def format_total(amount) -> str:
    return f"{Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP):.2f}"


def callback_urls(base_url: str, payment_id: str) -> dict[str, str]:
    base_url = base_url.rstrip("/")
    return {
        "wsb_return_url": f"{base_url}/api/payment/success?paymentId={payment_id}",
        "wsb_cancel_return_url": f"{base_url}/api/payment/cancel?paymentId={payment_id}",
        "wsb_notify_url": f"{base_url}/api/payment/callback",
    }


class PaymentService:

    @staticmethod
    def _credentials() -> tuple[str, str]:
        if not settings.webpay_store_id or not settings.webpay_secret_key:
            raise ConfigurationError("WebPay credentials not configured")
        return settings.webpay_store_id, settings.webpay_secret_key

    @staticmethod
    async def create_session(
        db: AsyncSession,
        data: PaymentCreate,
        base_url: str,
        owner_id: str | None = None,
    ) -> PaymentCreateResponse:
        if data.amount is None or not data.description or not data.orderId:
            raise InvalidRequest("Amount, description and orderId are required")

        currency = (data.currency or "BYN").upper()
        currency_id = CURRENCY_CODES.get(currency)
        if currency_id is None:
            raise InvalidRequest(f"Unsupported currency: {data.currency}")

        amount = normalize_amount(data.amount)
        store_id, secret_key = PaymentService._credentials()

        payment_id = str(uuid.uuid4())
        seed = secrets.token_hex(16)
        test_flag = "1" if settings.webpay_sandbox else "0"

        signed = {
            "wsb_seed": seed,
            "wsb_storeid": store_id,
            "wsb_order_num": data.orderId,
            "wsb_test": test_flag,
            "wsb_currency_id": currency_id,
            "wsb_total": format_total(amount),
        }

        payment = Payment(
            id=payment_id,
            order_id=data.orderId,
            user_id=owner_id,
            amount=amount,
            currency=currency,
            description=data.description[:DESCRIPTION_MAX_LENGTH],
            status=PENDING,
            course_id=data.courseId,
            stage_id=data.stageId,
            wsb_seed=seed,
            wsb_test=test_flag,
            wsb_signature=generate_signature(signed, secret_key),
        )
        payment = await PaymentRepository.create(db, payment)

        webpay_payment_sessions_created_total.labels(currency=currency).inc()
        logger.info(
            "payment_session_created",
            payment_id=payment.id,
            order_id=payment.order_id,
            user_id=owner_id,
            test_mode=test_flag == "1",
        )
        return PaymentCreateResponse(
            paymentId=payment.id,
            paymentUrl=f"{base_url.rstrip('/')}/api/payment/form/{payment.id}",
        )

    @staticmethod
    async def get_payment(db: AsyncSession, payment_id: str) -> Payment:
        payment = await PaymentRepository.get_by_id(db, payment_id)
        if not payment:
            raise NotFound("Payment not found")
        return payment

    @staticmethod
    async def get_status(db: AsyncSession, payment_id: str, user_id: str | None = None) -> Payment:
        payment = await PaymentService.get_payment(db, payment_id)
        # Sessions owned by someone else look the same as missing ones
        if user_id and payment.user_id and payment.user_id != user_id:
            raise NotFound("Payment not found")
        return payment

    @staticmethod
    async def render_form(db: AsyncSession, payment_id: str, base_url: str) -> GatewayForm:
        """
        Builds the gateway form for a stored session.

        Seed, test flag and signature come from the record as persisted at
        creation; only the callback URLs are derived again, since they depend
        on the deployment's public address.
        """
        payment = await PaymentService.get_payment(db, payment_id)
        store_id, _ = PaymentService._credentials()
        total = format_total(payment.amount)

        fields = {
            "wsb_storeid": store_id,
            "wsb_order_num": payment.order_id,
            "wsb_test": payment.wsb_test,
            "wsb_currency_id": CURRENCY_CODES.get(payment.currency, payment.currency),
            "wsb_seed": payment.wsb_seed,
            "wsb_invoice_item_name[0]": payment.description or f"Payment for order {payment.order_id}",
            "wsb_invoice_item_quantity[0]": "1",
            "wsb_invoice_item_price[0]": total,
            "wsb_total": total,
            "wsb_signature": payment.wsb_signature,
        }
        fields.update(callback_urls(base_url, payment.id))

        return GatewayForm(action=f"{settings.webpay_api_url.rstrip('/')}/webpay", fields=fields)

    @staticmethod
    async def complete_redirect(db: AsyncSession, payment_id: str | None, status: str) -> Payment | None:
        """Marks the outcome reported by the browser return/cancel redirect."""
        if not payment_id:
            return None
        if status == SUCCESS and settings.webpay_verify_callback:
            # Only the signed notify callback may mark a payment as paid
            payment = await PaymentRepository.get_by_id(db, payment_id)
            if payment is None:
                logger.warning("redirect_for_unknown_payment", payment_id=payment_id, status=status)
            return payment
        payment = await PaymentRepository.set_status_by_id(db, payment_id, status)
        if payment is None:
            logger.warning("redirect_for_unknown_payment", payment_id=payment_id, status=status)
        return payment

    @staticmethod
    async def get_test_payment(db: AsyncSession, payment_id: str) -> Payment:
        payment = await PaymentService.get_payment(db, payment_id)
        if payment.wsb_test != "1":
            raise NotFound("Payment not found")
        return payment

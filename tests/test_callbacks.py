import pytest

from services.payment_service.callbacks import ACKNOWLEDGEMENT, CallbackReconciler, map_outcome
from services.payment_service.models import FAILED, SUCCESS
from services.payment_service.repository import PaymentRepository
from services.payment_service.schemas import PaymentCreate
from services.payment_service.service import PaymentService
from services.payment_service.signature import CALLBACK_SIGNATURE_FIELDS, generate_signature
from shared.errors import ConfigurationError, InvalidRequest


async def create_session(db, order_id="ord-1"):
    data = PaymentCreate(amount=19.90, currency="BYN", description="course", orderId=order_id)
    response = await PaymentService.create_session(db, data, "https://api.example.com")
    return response.paymentId


@pytest.mark.parametrize("value", ["success", "approved", "APPROVED", " Success "])
def test_success_values(value):
    assert map_outcome(value) == SUCCESS


@pytest.mark.parametrize("value", ["declined", "", None, "pending", "succeeded", 1, "approved!"])
def test_everything_else_fails_closed(value):
    assert map_outcome(value) == FAILED


async def test_approved_callback_marks_success(db):
    payment_id = await create_session(db)

    ack = await CallbackReconciler.handle_callback(db, {"wsb_order_num": "ord-1", "wsb_status": "approved"})

    assert ack == ACKNOWLEDGEMENT
    assert (await PaymentRepository.get_by_id(db, payment_id)).status == SUCCESS


async def test_declined_callback_marks_failed(db):
    payment_id = await create_session(db)

    await CallbackReconciler.handle_callback(db, {"wsb_order_num": "ord-1", "wsb_status": "declined"})

    assert (await PaymentRepository.get_by_id(db, payment_id)).status == FAILED


async def test_missing_outcome_marks_failed(db):
    payment_id = await create_session(db)

    await CallbackReconciler.handle_callback(db, {"wsb_order_num": "ord-1"})

    assert (await PaymentRepository.get_by_id(db, payment_id)).status == FAILED


async def test_replayed_callback_does_not_downgrade(db):
    payment_id = await create_session(db)

    await CallbackReconciler.handle_callback(db, {"wsb_order_num": "ord-1", "wsb_status": "approved"})
    await CallbackReconciler.handle_callback(db, {"wsb_order_num": "ord-1", "wsb_status": "declined"})

    assert (await PaymentRepository.get_by_id(db, payment_id)).status == SUCCESS


async def test_unknown_order_is_acknowledged(db):
    ack = await CallbackReconciler.handle_callback(db, {"wsb_order_num": "nope", "wsb_status": "approved"})

    assert ack == ACKNOWLEDGEMENT


@pytest.mark.parametrize("payload", [{}, {"wsb_order_num": ""}, {"wsb_status": "approved"}])
async def test_order_number_is_required(db, payload):
    with pytest.raises(InvalidRequest):
        await CallbackReconciler.handle_callback(db, payload)


async def test_signature_checked_when_enabled(db, webpay_settings):
    webpay_settings.webpay_verify_callback = True
    payment_id = await create_session(db)
    payload = {"wsb_order_num": "ord-1", "wsb_tid": "555", "wsb_status": "approved"}

    with pytest.raises(InvalidRequest):
        await CallbackReconciler.handle_callback(db, {**payload, "wsb_signature": "0" * 40})
    assert (await PaymentRepository.get_by_id(db, payment_id)).status == "pending"

    signature = generate_signature(payload, "secret-abc", CALLBACK_SIGNATURE_FIELDS)
    await CallbackReconciler.handle_callback(db, {**payload, "wsb_signature": signature})
    assert (await PaymentRepository.get_by_id(db, payment_id)).status == SUCCESS


async def test_unsigned_callback_rejected_when_enabled(db, webpay_settings):
    webpay_settings.webpay_verify_callback = True
    await create_session(db)

    with pytest.raises(InvalidRequest):
        await CallbackReconciler.handle_callback(db, {"wsb_order_num": "ord-1", "wsb_status": "approved"})


async def test_verification_without_secret_is_refused(db, webpay_settings):
    payment_id = await create_session(db)
    webpay_settings.webpay_verify_callback = True
    webpay_settings.webpay_secret_key = ""
    payload = {"wsb_order_num": "ord-1", "wsb_tid": "1", "wsb_status": "approved"}
    keyless = generate_signature(payload, "", CALLBACK_SIGNATURE_FIELDS)

    with pytest.raises(ConfigurationError):
        await CallbackReconciler.handle_callback(db, {**payload, "wsb_signature": keyless})

    assert (await PaymentRepository.get_by_id(db, payment_id)).status == "pending"

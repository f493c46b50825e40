from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import settings
from shared.errors import InvalidRequest
from shared.security import get_current_user, limiter

from .callbacks import CallbackReconciler
from .models import FAILED, SUCCESS
from .schemas import PaymentCreate, PaymentCreateResponse, PaymentStatusResponse
from .service import PaymentService, format_total

router = APIRouter(prefix="/api/payment", tags=["Payments"])

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def public_base_url(request: Request) -> str:
    """Address the gateway and browser should use to reach this deployment."""
    return (settings.public_base_url or str(request.base_url)).rstrip("/")


async def read_payload(request: Request) -> dict:
    """The gateway posts form-encoded data; JSON is accepted as well."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise InvalidRequest("Malformed JSON body")
        if not isinstance(body, dict):
            raise InvalidRequest("Expected a JSON object")
        return body
    form = await request.form()
    return dict(form)


@router.post("/create", response_model=PaymentCreateResponse)
@limiter.limit("30/minute")
async def create_payment(
    request: Request,
    payload: PaymentCreate,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await PaymentService.create_session(
        db, payload, base_url=public_base_url(request), owner_id=user_id
    )


@router.get("/form/{payment_id}", response_class=HTMLResponse)
async def payment_form(payment_id: str, request: Request, db: AsyncSession = Depends(get_db)):
    form = await PaymentService.render_form(db, payment_id, public_base_url(request))
    return templates.TemplateResponse(
        request, "payment_form.html", {"action": form.action, "fields": form.fields}
    )


@router.get("/status/{payment_id}", response_model=PaymentStatusResponse)
async def payment_status(
    payment_id: str,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    payment = await PaymentService.get_status(db, payment_id, user_id)
    mode = " (test mode)" if payment.wsb_test == "1" else ""
    return PaymentStatusResponse(
        paymentId=payment.id,
        status=payment.status,
        message=f"Payment {payment.status}{mode}",
    )


@router.post("/callback", response_class=PlainTextResponse)
async def payment_callback(request: Request, db: AsyncSession = Depends(get_db)):
    payload = await read_payload(request)
    return await CallbackReconciler.handle_callback(db, payload)


@router.get("/success", response_class=HTMLResponse)
async def payment_success(request: Request, paymentId: str | None = None, db: AsyncSession = Depends(get_db)):
    await PaymentService.complete_redirect(db, paymentId, SUCCESS)
    return templates.TemplateResponse(
        request,
        "payment_result.html",
        {
            "succeeded": True,
            "payment_id": paymentId or "",
            "deep_link": f"{settings.app_deep_link}payment-success",
        },
    )


@router.get("/cancel", response_class=HTMLResponse)
async def payment_cancel(request: Request, paymentId: str | None = None, db: AsyncSession = Depends(get_db)):
    await PaymentService.complete_redirect(db, paymentId, FAILED)
    return templates.TemplateResponse(
        request,
        "payment_result.html",
        {
            "succeeded": False,
            "payment_id": paymentId or "",
            "deep_link": f"{settings.app_deep_link}payment-fail",
        },
    )


@router.get("/test/{payment_id}", response_class=HTMLResponse)
async def test_payment_page(payment_id: str, request: Request, db: AsyncSession = Depends(get_db)):
    """Sandbox stand-in for the gateway page, for exercising the redirect flow."""
    payment = await PaymentService.get_test_payment(db, payment_id)
    return templates.TemplateResponse(
        request,
        "test_payment.html",
        {
            "payment": payment,
            "total": format_total(payment.amount),
            "base_url": public_base_url(request),
        },
    )

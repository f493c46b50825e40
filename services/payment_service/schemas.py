from pydantic import BaseModel


class PaymentCreate(BaseModel):
    # Presence is checked by PaymentService so every caller gets the same message
    amount: float | None = None
    currency: str = "BYN"
    description: str | None = None
    orderId: str | None = None
    courseId: int | None = None
    stageId: int | None = None


class PaymentCreateResponse(BaseModel):
    success: bool = True
    paymentId: str
    paymentUrl: str
    message: str = "Payment URL generated"


class PaymentStatusResponse(BaseModel):
    success: bool = True
    paymentId: str
    status: str
    message: str


class GatewayForm(BaseModel):
    """Everything needed to render the self-submitting gateway form."""
    action: str
    fields: dict[str, str]

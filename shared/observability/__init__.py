from .setup import setup_observability
from .metrics import (
    webpay_payment_sessions_created_total,
    webpay_callbacks_total,
    webpay_status_transitions_total,
)

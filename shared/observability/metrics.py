from prometheus_client import Counter

# Business Metrics
webpay_payment_sessions_created_total = Counter(
    "webpay_payment_sessions_created_total",
    "Total payment sessions created",
    ["currency"]
)

webpay_callbacks_total = Counter(
    "webpay_callbacks_total",
    "Total gateway callbacks received",
    ["outcome"] # Labels: 'success', 'failed', 'unknown_order', 'rejected'
)

webpay_status_transitions_total = Counter(
    "webpay_status_transitions_total",
    "Payment status transitions applied",
    ["status"] # Labels: 'success', 'failed'
)

"""
WebPay request signing.

The signature is a SHA-1 digest over a fixed subset of the submitted fields,
serialized as ``name=value`` pairs joined with ``&`` in protocol order, with
the store's secret key appended directly after the last pair. Fields whose
value is ``None`` are left out of the signed string entirely.
"""
import hashlib
import secrets
from typing import Any, Iterable, Mapping

# Signed subset of the payment form, in signing order
FORM_SIGNATURE_FIELDS = (
    "wsb_seed",
    "wsb_storeid",
    "wsb_order_num",
    "wsb_test",
    "wsb_currency_id",
    "wsb_total",
)

# Signed subset of the gateway's notify callback
CALLBACK_SIGNATURE_FIELDS = (
    "wsb_order_num",
    "wsb_tid",
    "wsb_status",
)


def build_signature_string(params: Mapping[str, Any], fields: Iterable[str]) -> str:
    pairs = [f"{name}={params[name]}" for name in fields if params.get(name) is not None]
    return "&".join(pairs)


def generate_signature(
    params: Mapping[str, Any],
    secret_key: str,
    fields: Iterable[str] = FORM_SIGNATURE_FIELDS,
) -> str:
    """Returns the lowercase hex SHA-1 signature for ``params``."""
    payload = build_signature_string(params, fields) + secret_key
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


def verify_signature(
    params: Mapping[str, Any],
    signature: str | None,
    secret_key: str,
    fields: Iterable[str] = FORM_SIGNATURE_FIELDS,
) -> bool:
    if not signature:
        return False
    expected = generate_signature(params, secret_key, fields)
    return secrets.compare_digest(expected, str(signature).strip().lower())

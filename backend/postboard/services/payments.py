from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any
from uuid import uuid4

from postboard.core.settings import settings
from postboard.services.errors import PaymentError, ValidationError


logger = logging.getLogger(__name__)


PAYMENT_DETAIL_FIELDS: dict[str, str] = {
    "credit_card": "card_number",
    "paypal": "paypal_email",
    "bank_transfer": "bank_account",
}

TRANSACTION_PREFIXES: dict[str, str] = {
    "credit_card": "cc",
    "paypal": "pp",
    "bank_transfer": "bt",
}


def normalize_payment_method(payment_method: Any) -> str:
    method = str(getattr(payment_method, "value", payment_method) or "").strip().lower()
    if method not in PAYMENT_DETAIL_FIELDS:
        allowed = ", ".join(sorted(PAYMENT_DETAIL_FIELDS))
        raise ValidationError(f"Invalid payment_method (expected one of: {allowed})", field="payment_method")
    return method


def normalize_payment_details(details: Any) -> dict[str, Any]:
    if details is None:
        return {}
    if hasattr(details, "model_dump"):
        details = details.model_dump(exclude_none=True)
    if not isinstance(details, dict):
        raise ValidationError("payment_details must be an object", field="payment_details")
    return {k: v for k, v in details.items() if v is not None}


def validate_payment(payment_method: Any, details: Any) -> tuple[str, dict[str, Any]]:
    """Return the normalized method and details, or raise ValidationError.

    Each method requires exactly one detail field to be present and non-blank.
    """
    method = normalize_payment_method(payment_method)
    clean = normalize_payment_details(details)
    field = PAYMENT_DETAIL_FIELDS[method]
    if not str(clean.get(field) or "").strip():
        raise ValidationError(f"{field} is required for {method} payments", field=field)
    if method == "paypal" and "@" not in str(clean.get(field)):
        raise ValidationError("paypal_email must be an email address", field=field)
    return method, clean


def new_transaction_id(payment_method: str) -> str:
    prefix = TRANSACTION_PREFIXES.get(payment_method, "tx")
    return f"{prefix}_{uuid4().hex}"


class PaymentGateway:
    name = "base"

    def process(self, payment_method: str, amount: Decimal, details: dict[str, Any]) -> str:
        raise NotImplementedError


class SimulatedPaymentGateway(PaymentGateway):
    name = "simulated"

    def process(self, payment_method: str, amount: Decimal, details: dict[str, Any]) -> str:
        method, _clean = validate_payment(payment_method, details)
        transaction_id = new_transaction_id(method)
        logger.info("payments.simulated.charge method=%s amount=%s transaction_id=%s", method, amount, transaction_id)
        return transaction_id


class HttpPaymentGateway(PaymentGateway):
    name = "http"

    def __init__(self, url: str, api_key: str | None = None, timeout_s: float = 30) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout_s = timeout_s

    def process(self, payment_method: str, amount: Decimal, details: dict[str, Any]) -> str:
        import requests

        method, clean = validate_payment(payment_method, details)
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            resp = requests.post(
                self.url,
                headers=headers,
                json={
                    "payment_method": method,
                    "amount": str(amount),
                    "details": clean,
                    "reference": new_transaction_id(method),
                },
                timeout=self.timeout_s,
            )
        except requests.RequestException:
            logger.exception("payments.http.error method=%s amount=%s", method, amount)
            raise PaymentError("Payment gateway unavailable")

        if resp.status_code >= 400:
            logger.info("payments.http.declined method=%s status=%s", method, resp.status_code)
            raise PaymentError(f"Payment gateway error ({resp.status_code})")
        try:
            data = resp.json() or {}
        except ValueError:
            raise PaymentError("Payment gateway returned invalid JSON")
        transaction_id = str(data.get("transaction_id") or "").strip()
        if not transaction_id:
            raise PaymentError("Payment gateway returned no transaction_id")
        return transaction_id


def get_payment_gateway() -> PaymentGateway:
    if settings.payment_gateway == "http":
        if not settings.payment_gateway_url:
            raise RuntimeError("PAYMENT_GATEWAY_URL is not configured")
        return HttpPaymentGateway(
            url=settings.payment_gateway_url,
            api_key=settings.payment_gateway_api_key,
            timeout_s=settings.payment_gateway_timeout_s,
        )
    return SimulatedPaymentGateway()

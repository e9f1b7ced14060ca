import json
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

import requests

from courtside.core.config import settings
from courtside.services.payfast import sign, to_canonical_query_string

logger = logging.getLogger(__name__)

# Field order PayFast hashes in; build_payment_fields emits exactly this order.
PAYMENT_FIELD_ORDER = (
    "merchant_id",
    "merchant_key",
    "return_url",
    "cancel_url",
    "notify_url",
    "name_first",
    "name_last",
    "email_address",
    "cell_number",
    "m_payment_id",
    "amount",
    "item_name",
    "item_description",
    "custom_int1",
    "custom_str1",
    "custom_str2",
)


@dataclass
class PayFastConfig:
    merchant_id: str
    merchant_key: str
    passphrase: str = ""
    sandbox: bool = True
    timeout: int = 25

    @property
    def host(self) -> str:
        return "sandbox.payfast.co.za" if self.sandbox else "www.payfast.co.za"

    @property
    def process_url(self) -> str:
        return f"https://{self.host}/eng/process"

    @property
    def onsite_process_url(self) -> str:
        return f"https://{self.host}/onsite/process"

    def onsite_payment_url(self, uuid: str) -> str:
        return f"https://{self.host}/onsite/payments/{uuid}"

    @property
    def has_credentials(self) -> bool:
        return bool(self.merchant_id and self.merchant_key)


class PayFastError(RuntimeError):
    pass


def mask(value: str) -> str:
    return "***" + value[-4:] if value else "MISSING"


def config_from_settings() -> PayFastConfig:
    cfg = PayFastConfig(
        merchant_id=settings.PAYFAST_MERCHANT_ID,
        merchant_key=settings.PAYFAST_MERCHANT_KEY,
        passphrase=settings.PAYFAST_PASSPHRASE,
        sandbox=settings.PAYFAST_SANDBOX or not settings.PAYFAST_MERCHANT_ID,
        timeout=settings.PAYFAST_TIMEOUT,
    )
    if not cfg.has_credentials:
        logger.warning("PayFast credentials not configured. Using sandbox mode.")
    return cfg


def format_amount(amount) -> str:
    return str(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def build_payment_fields(
    cfg: PayFastConfig,
    *,
    return_url: str,
    cancel_url: str,
    notify_url: str,
    email_address: str,
    m_payment_id: str,
    amount,
    item_name: str,
    name_first: str = "",
    name_last: str = "",
    cell_number: str = "",
    item_description: str = "",
    custom_int1: str = "",
    custom_str1: str = "",
    custom_str2: str = "",
) -> dict[str, str]:
    """Payment fields in PayFast's documented order. Empty fields are kept here; the codec skips them."""
    values = {
        "merchant_id": cfg.merchant_id,
        "merchant_key": cfg.merchant_key,
        "return_url": return_url,
        "cancel_url": cancel_url,
        "notify_url": notify_url,
        "name_first": name_first,
        "name_last": name_last,
        "email_address": email_address,
        "cell_number": cell_number,
        "m_payment_id": m_payment_id,
        "amount": format_amount(amount),
        "item_name": item_name,
        "item_description": item_description,
        "custom_int1": custom_int1,
        "custom_str1": custom_str1,
        "custom_str2": custom_str2,
    }
    return {k: (values[k] or "") for k in PAYMENT_FIELD_ORDER}


def signed_fields(cfg: PayFastConfig, fields: dict[str, str]) -> dict[str, str]:
    """Copy of ``fields`` without blanks and with ``signature`` appended, for the hosted form."""
    clean = {k: str(v).strip() for k, v in fields.items() if k != "signature" and v is not None and str(v).strip()}
    clean["signature"] = sign(clean, cfg.passphrase)
    return clean


class PayFastClient:
    def __init__(self, cfg: PayFastConfig):
        self.cfg = cfg

    def generate_onsite_identifier(self, fields: dict[str, str]) -> str:
        """Register an onsite (embedded modal) payment and return PayFast's uuid for it."""
        if not self.cfg.has_credentials:
            raise PayFastError(
                "PayFast merchant credentials (merchant_id and merchant_key) are required but not configured. "
                "Set PAYFAST_MERCHANT_ID and PAYFAST_MERCHANT_KEY."
            )
        body = to_canonical_query_string(fields, self.cfg.passphrase)
        logger.info(
            "PayFast onsite request merchant_id=%s amount=%s sandbox=%s",
            mask(self.cfg.merchant_id), fields.get("amount"), self.cfg.sandbox,
        )
        try:
            r = requests.post(
                self.cfg.onsite_process_url,
                data=body.encode("utf-8"),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.cfg.timeout,
            )
        except requests.RequestException as e:
            raise PayFastError(f"PayFast onsite request failed: {e}") from e

        logger.debug("PayFast onsite response %s: %s", r.status_code, r.text[:500])
        try:
            result = json.loads(r.text)
        except ValueError:
            raise PayFastError(f"PayFast returned invalid response: {r.text[:200]}")
        if not isinstance(result, dict):
            raise PayFastError(f"PayFast returned invalid response: {r.text[:200]}")

        if result.get("uuid"):
            return str(result["uuid"])
        if result.get("error"):
            raise PayFastError(f"PayFast error: {result['error']}")
        if result.get("status") and result["status"] != "success":
            raise PayFastError(f"PayFast returned status: {result['status']}")
        raise PayFastError("PayFast did not return a UUID")

from __future__ import annotations
import html
import json
import logging
import uuid
from decimal import Decimal, InvalidOperation
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from sqlalchemy.orm import Session

from courtside.db.session import get_db
from courtside.core.config import settings
from courtside.models.booking import Booking
from courtside.models.payment import Payment
from courtside.schemas.payments import PayFastInitiateRequest, PayFastInitiateResponse
from courtside.services.audit_service import PAYFAST_ACTOR, log_audit
from courtside.services.payfast import parse_itn, payment_status_from_payfast, verify
from courtside.services.payfast_client import (
    PayFastClient,
    PayFastError,
    build_payment_fields,
    config_from_settings,
    mask,
    signed_fields,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])

REQUIRED_INITIATE_FIELDS = ("clubId", "userId", "amount", "itemName", "userEmail")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _payfast_urls(payment_id: str) -> dict[str, str]:
    base = settings.api_base_url
    return {
        "return_url": f"{base}/payments/payfast/return?paymentId={payment_id}",
        "cancel_url": f"{base}/payments/payfast/cancel?paymentId={payment_id}",
        "notify_url": f"{base}/payments/payfast/notify",
    }


def _get_payment(db: Session, payment_id: str | None) -> Payment:
    p = db.get(Payment, payment_id) if payment_id else None
    if not p:
        raise HTTPException(status_code=404, detail="Payment not found")
    return p


@router.post("/payments/payfast/initiate", response_model=PayFastInitiateResponse, response_model_exclude_none=True)
def initiate_payfast_payment(body: PayFastInitiateRequest, db: Session = Depends(get_db)):
    missing = [f for f in REQUIRED_INITIATE_FIELDS if getattr(body, f) in (None, "")]
    if missing:
        logger.warning("PayFast initiate missing fields: %s", missing)
        raise HTTPException(status_code=400, detail="Missing required fields: " + ", ".join(REQUIRED_INITIATE_FIELDS))
    try:
        amount = Decimal(str(body.amount).strip())
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite() or amount <= 0:
        raise HTTPException(status_code=400, detail="Invalid amount. Must be a positive number.")
    amount = amount.quantize(Decimal("0.01"))

    if body.bookingId and not db.get(Booking, body.bookingId):
        raise HTTPException(status_code=404, detail="Booking not found")

    cfg = config_from_settings()
    payment = Payment(
        id=str(uuid.uuid4()),
        club_id=body.clubId,
        user_id=body.userId,
        booking_id=body.bookingId or None,
        amount=amount,
        currency=settings.PAYFAST_CURRENCY,
        status="pending",
        provider="payfast",
        item_name=body.itemName,
        item_description=body.itemDescription or None,
        payer_email=body.userEmail,
        payer_name=body.userName or None,
        payer_phone=body.userPhone or None,
        payfast_merchant_id=cfg.merchant_id,
    )
    db.add(payment)
    db.flush()

    name_parts = (body.userName or "").split()
    urls = _payfast_urls(payment.id)
    fields = build_payment_fields(
        cfg,
        **urls,
        name_first=name_parts[0] if name_parts else "",
        name_last=" ".join(name_parts[1:]),
        email_address=body.userEmail,
        cell_number=body.userPhone or "",
        m_payment_id=payment.id,
        amount=amount,
        item_name=body.itemName,
        item_description=body.itemDescription or "",
        custom_int1=body.bookingId or "",
        custom_str1=body.clubId,
        custom_str2=body.userId,
    )

    onsite_uuid = None
    warning = None
    if settings.PAYFAST_ONSITE_ENABLED:
        try:
            onsite_uuid = PayFastClient(cfg).generate_onsite_identifier(fields)
        except PayFastError as e:
            # Onsite payments may not be enabled for the merchant; the hosted form still works
            logger.warning("PayFast onsite unavailable for payment %s, using form flow: %s", payment.id, e)
            warning = f"Onsite payment unavailable: {e}. Using regular flow."

    signed = signed_fields(cfg, fields)
    payment.payfast_response_json = json.dumps(signed)
    payment.payfast_signature = signed["signature"]
    payment.return_url = urls["return_url"]
    payment.cancel_url = urls["cancel_url"]
    payment.notify_url = urls["notify_url"]
    if onsite_uuid:
        payment.payfast_payment_id = onsite_uuid
    if payment.booking_id:
        booking = db.get(Booking, payment.booking_id)
        if booking and booking.payment_status != "paid":
            booking.payment_status = "pending"
    log_audit(db, actor_user_id=body.userId, action="payment_initiated", entity_type="payment", entity_id=payment.id,
              details={"amount": str(amount), "bookingId": body.bookingId, "onsite": bool(onsite_uuid),
                       "merchantId": mask(cfg.merchant_id), "sandbox": cfg.sandbox})
    db.commit()

    return PayFastInitiateResponse(
        paymentId=payment.id,
        paymentFormUrl=f"{settings.api_base_url}/payments/payfast/form/{payment.id}",
        onsite=bool(onsite_uuid),
        onsiteUuid=onsite_uuid,
        onsitePaymentUrl=cfg.onsite_payment_url(onsite_uuid) if onsite_uuid else None,
        warning=warning,
    )


@router.post("/payments/payfast/notify")
async def payfast_notify(req: Request, db: Session = Depends(get_db)):
    """PayFast ITN (Instant Transaction Notification) webhook."""
    raw = await req.body()
    itn = parse_itn(raw)
    payment_id = itn.get("m_payment_id")
    logger.info("PayFast ITN received m_payment_id=%s pf_payment_id=%s status=%s",
                payment_id, itn.get("pf_payment_id"), itn.get("payment_status"))

    cfg = config_from_settings()
    if not verify(itn, cfg.passphrase):
        logger.warning("Rejected PayFast ITN with invalid signature m_payment_id=%s", payment_id)
        log_audit(db, actor_user_id=PAYFAST_ACTOR, action="itn_rejected", entity_type="payment", entity_id=payment_id,
                  details={"reason": "invalid_signature", "pf_payment_id": itn.get("pf_payment_id")})
        db.commit()
        raise HTTPException(status_code=400, detail="Invalid signature")

    if not payment_id:
        logger.warning("PayFast ITN without m_payment_id")
        raise HTTPException(status_code=400, detail="Missing payment ID")

    payment = db.get(Payment, payment_id)
    if not payment:
        logger.warning("PayFast ITN for unknown payment %s", payment_id)
        raise HTTPException(status_code=404, detail="Payment not found")

    status = payment_status_from_payfast(itn.get("payment_status"))
    now = _now()
    payment.status = status
    payment.payfast_payment_id = itn.get("pf_payment_id") or payment.payfast_payment_id
    payment.payfast_signature = itn.get("signature")
    payment.payfast_response_json = json.dumps(itn)
    payment.updated_at = now

    booking = db.get(Booking, payment.booking_id) if payment.booking_id else None
    if status == "completed":
        payment.paid_at = now
        if booking:
            booking.status = "confirmed"
            booking.payment_status = "paid"
            booking.payment_id = payment.id
    elif status == "failed":
        payment.failed_at = now
        if booking:
            booking.payment_status = "failed"

    log_audit(db, actor_user_id=PAYFAST_ACTOR, action="itn_received", entity_type="payment", entity_id=payment.id,
              details={"status": status, "pf_payment_id": itn.get("pf_payment_id"), "amount_gross": itn.get("amount_gross")})
    db.commit()
    logger.info("Payment %s is now %s", payment.id, status)
    return PlainTextResponse("OK")


_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


def _html_page(title: str, body: str) -> HTMLResponse:
    return HTMLResponse(
        _PAGE.format(title=html.escape(title), body=body),
        headers={"X-Frame-Options": "SAMEORIGIN"},
    )


def _post_message_script(message: dict) -> str:
    payload = json.dumps(message).replace("<", "\\u003c")
    return (
        "<script>\n"
        "  if (window.parent !== window) {\n"
        f"    window.parent.postMessage({payload}, '*');\n"
        "  }\n"
        "</script>"
    )


@router.get("/payments/payfast/form/{payment_id}", response_class=HTMLResponse)
def payfast_form(payment_id: str, db: Session = Depends(get_db)):
    """Embeddable payment page: the onsite modal when we have a uuid, else an auto-submitting hosted form."""
    payment = _get_payment(db, payment_id)
    cfg = config_from_settings()
    if not cfg.has_credentials:
        return PlainTextResponse(
            "PayFast merchant credentials are not configured. Set PAYFAST_MERCHANT_ID and PAYFAST_MERCHANT_KEY.",
            status_code=500,
        )

    onsite_uuid = payment.payfast_payment_id or ""
    if len(onsite_uuid) > 30:
        src = html.escape(cfg.onsite_payment_url(onsite_uuid), quote=True)
        return _html_page("PayFast Payment", f'<iframe src="{src}" style="border:0;width:100%;min-height:100vh"></iframe>')

    stored = json.loads(payment.payfast_response_json or "{}")
    # Always re-sign with the current credentials and iframe-friendly return/cancel URLs
    urls = _payfast_urls(payment.id)
    fields = {
        **stored,
        "merchant_id": cfg.merchant_id,
        "merchant_key": cfg.merchant_key,
        "return_url": urls["return_url"],
        "cancel_url": urls["cancel_url"],
    }
    signed = signed_fields(cfg, fields)
    inputs = "\n".join(
        f'    <input type="hidden" name="{html.escape(k, quote=True)}" value="{html.escape(v, quote=True)}">'
        for k, v in signed.items()
    )
    body = (
        f'  <form id="payfast" action="{html.escape(cfg.process_url, quote=True)}" method="post">\n'
        f"{inputs}\n"
        '    <noscript><button type="submit">Continue to PayFast</button></noscript>\n'
        "  </form>\n"
        "  <script>document.getElementById('payfast').submit();</script>"
    )
    return _html_page("PayFast Payment", body)


_RETURN_MESSAGES = {
    "completed": ("Payment Successful!", "Your payment has been processed successfully."),
    "pending": ("Payment Processing", "Your payment is being processed. Please wait..."),
    "processing": ("Payment Processing", "Your payment is being processed. Please wait..."),
    "failed": ("Payment Failed", "Your payment could not be completed."),
    "cancelled": ("Payment Cancelled", "Your payment could not be completed."),
}


@router.get("/payments/payfast/return", response_class=HTMLResponse)
def payfast_return(paymentId: str | None = None, db: Session = Depends(get_db)):
    if not paymentId:
        return PlainTextResponse("Payment ID required", status_code=400)
    payment = db.get(Payment, paymentId)
    if not payment:
        return PlainTextResponse("Payment not found", status_code=404)
    heading, text = _RETURN_MESSAGES.get(payment.status, _RETURN_MESSAGES["pending"])
    body = (
        f'  <div class="{html.escape(payment.status)}">\n'
        f"    <h2>{heading}</h2>\n"
        f"    <p>{text}</p>\n"
        "  </div>\n"
        + _post_message_script({"type": "PAYFAST_RETURN", "paymentId": payment.id, "status": payment.status})
    )
    return _html_page("Payment Return", body)


@router.get("/payments/payfast/cancel", response_class=HTMLResponse)
def payfast_cancel(paymentId: str | None = None, db: Session = Depends(get_db)):
    if paymentId:
        payment = db.get(Payment, paymentId)
        # A late cancel redirect must not undo an ITN that already completed the payment
        if payment and payment.status not in ("completed", "cancelled"):
            payment.status = "cancelled"
            payment.updated_at = _now()
            log_audit(db, actor_user_id=PAYFAST_ACTOR, action="payment_cancelled", entity_type="payment", entity_id=payment.id)
            db.commit()
    body = (
        '  <div class="cancelled">\n'
        "    <h2>Payment Cancelled</h2>\n"
        "    <p>You cancelled the payment. No charge was made.</p>\n"
        "  </div>\n"
        + _post_message_script({"type": "PAYFAST_CANCEL", "paymentId": paymentId or ""})
    )
    return _html_page("Payment Cancelled", body)

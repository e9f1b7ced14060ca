"""Tests for the PayFast payment endpoints (initiate, ITN, hosted pages)."""

import json
from decimal import Decimal
from unittest.mock import MagicMock, patch
from urllib.parse import urlencode

import pytest

from courtside.models.audit_log import AuditLog
from courtside.models.booking import Booking
from courtside.models.payment import Payment
from courtside.services.payfast import sign, verify

INITIATE = "/api/v1/payments/payfast/initiate"
NOTIFY = "/api/v1/payments/payfast/notify"
ONSITE_UUID = "7f3c2d1e-9a8b-4c5d-8e7f-123456789abc"


@pytest.fixture()
def initiate(client, club, member):
    def _initiate(**overrides):
        body = {
            "clubId": club.id,
            "userId": member.id,
            "amount": "460",
            "itemName": "Court 1 Booking",
            "userEmail": "jane@example.com",
            "userName": "Jane van der Merwe",
        }
        body.update(overrides)
        return client.post(INITIATE, json=body)

    return _initiate


def _onsite_response(text):
    r = MagicMock()
    r.text = text
    r.status_code = 200
    return r


def itn_body(payment_id, status="COMPLETE", passphrase="jt7NOE43FZPn", tamper=False):
    fields = {
        "m_payment_id": payment_id,
        "pf_payment_id": "1089250",
        "payment_status": status,
        "item_name": "Court 1 Booking",
        "item_description": "",
        "amount_gross": "460.00",
        "amount_fee": "-10.58",
        "amount_net": "449.42",
        "name_first": "Jane",
        "email_address": "jane@example.com",
        "merchant_id": "10000100",
    }
    fields["signature"] = sign(fields, passphrase)
    if tamper:
        fields["amount_gross"] = "1.00"
    return urlencode(fields)


def post_itn(client, body):
    return client.post(NOTIFY, content=body, headers={"Content-Type": "application/x-www-form-urlencoded"})


class TestInitiate:
    def test_missing_fields(self, client):
        resp = client.post(INITIATE, json={"clubId": "c1"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing required fields: clubId, userId, amount, itemName, userEmail"

    @pytest.mark.parametrize("amount", ["-5", "0", "abc", "NaN"])
    def test_invalid_amount(self, initiate, amount):
        resp = initiate(amount=amount)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid amount. Must be a positive number."

    def test_unknown_booking(self, initiate):
        resp = initiate(bookingId="does-not-exist")
        assert resp.status_code == 404

    def test_form_flow(self, initiate, payfast_settings, db):
        resp = initiate()
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["onsite"] is False
        assert "onsiteUuid" not in data
        assert "warning" not in data
        assert data["paymentFormUrl"].endswith(f"/api/v1/payments/payfast/form/{data['paymentId']}")

        p = db.get(Payment, data["paymentId"])
        assert p.status == "pending"
        assert p.amount == Decimal("460.00")
        assert p.return_url.endswith(f"/payments/payfast/return?paymentId={p.id}")
        stored = json.loads(p.payfast_response_json)
        assert stored["amount"] == "460.00"
        assert stored["name_first"] == "Jane"
        assert stored["name_last"] == "van der Merwe"
        assert stored["signature"] == p.payfast_signature
        assert verify(stored, payfast_settings.PAYFAST_PASSPHRASE)
        assert db.query(AuditLog).filter(AuditLog.action == "payment_initiated").count() == 1

    def test_marks_booking_payment_pending(self, initiate, payfast_settings, make_booking, db):
        b = make_booking("09:00", "10:00", status="pending")
        resp = initiate(bookingId=b.id)
        assert resp.status_code == 200
        db.expire_all()
        assert db.get(Booking, b.id).payment_status == "pending"

    def test_onsite_uuid(self, initiate, payfast_settings, monkeypatch):
        monkeypatch.setattr(payfast_settings, "PAYFAST_ONSITE_ENABLED", True)
        with patch("courtside.services.payfast_client.requests.post",
                   return_value=_onsite_response(json.dumps({"uuid": ONSITE_UUID}))):
            resp = initiate()
        data = resp.json()
        assert data["onsite"] is True
        assert data["onsiteUuid"] == ONSITE_UUID
        assert data["onsitePaymentUrl"] == f"https://sandbox.payfast.co.za/onsite/payments/{ONSITE_UUID}"

    def test_onsite_failure_falls_back_to_form(self, initiate, payfast_settings, monkeypatch):
        monkeypatch.setattr(payfast_settings, "PAYFAST_ONSITE_ENABLED", True)
        with patch("courtside.services.payfast_client.requests.post",
                   return_value=_onsite_response('{"error": "Onsite not enabled"}')):
            resp = initiate()
        assert resp.status_code == 200
        data = resp.json()
        assert data["onsite"] is False
        assert "Onsite not enabled" in data["warning"]
        assert "paymentFormUrl" in data


class TestNotify:
    def test_completed_confirms_booking(self, client, initiate, payfast_settings, make_booking, db):
        b = make_booking("09:00", "10:00", status="pending")
        payment_id = initiate(bookingId=b.id).json()["paymentId"]

        resp = post_itn(client, itn_body(payment_id))
        assert resp.status_code == 200
        assert resp.text == "OK"

        db.expire_all()
        p = db.get(Payment, payment_id)
        assert p.status == "completed"
        assert p.paid_at is not None
        assert p.payfast_payment_id == "1089250"
        booking = db.get(Booking, b.id)
        assert booking.status == "confirmed"
        assert booking.payment_status == "paid"
        assert booking.payment_id == payment_id

    def test_failed_marks_booking(self, client, initiate, payfast_settings, make_booking, db):
        b = make_booking("09:00", "10:00", status="pending")
        payment_id = initiate(bookingId=b.id).json()["paymentId"]

        assert post_itn(client, itn_body(payment_id, status="FAILED")).status_code == 200

        db.expire_all()
        assert db.get(Payment, payment_id).failed_at is not None
        booking = db.get(Booking, b.id)
        assert booking.status == "pending"
        assert booking.payment_status == "failed"

    def test_tampered_itn_rejected(self, client, initiate, payfast_settings, db):
        payment_id = initiate().json()["paymentId"]

        resp = post_itn(client, itn_body(payment_id, tamper=True))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid signature"

        db.expire_all()
        assert db.get(Payment, payment_id).status == "pending"
        assert db.query(AuditLog).filter(AuditLog.action == "itn_rejected").count() == 1

    def test_wrong_passphrase_rejected(self, client, initiate, payfast_settings):
        payment_id = initiate().json()["paymentId"]
        resp = post_itn(client, itn_body(payment_id, passphrase="not-the-passphrase"))
        assert resp.status_code == 400

    def test_unsigned_itn_rejected(self, client, payfast_settings):
        resp = post_itn(client, urlencode({"m_payment_id": "x", "payment_status": "COMPLETE"}))
        assert resp.status_code == 400

    def test_undecodable_body_rejected(self, client, payfast_settings, db):
        resp = post_itn(client, b"m_payment_id=\xff\xfe&signature=abc")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid signature"
        assert db.query(AuditLog).filter(AuditLog.action == "itn_rejected").count() == 1

    def test_missing_payment_id(self, client, payfast_settings):
        fields = {"pf_payment_id": "1", "payment_status": "COMPLETE"}
        fields["signature"] = sign(fields, payfast_settings.PAYFAST_PASSPHRASE)
        resp = post_itn(client, urlencode(fields))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing payment ID"

    def test_unknown_payment(self, client, payfast_settings):
        resp = post_itn(client, itn_body("no-such-payment"))
        assert resp.status_code == 404


class TestPaymentPages:
    def test_form_page(self, client, initiate, payfast_settings):
        payment_id = initiate().json()["paymentId"]
        resp = client.get(f"/api/v1/payments/payfast/form/{payment_id}")
        assert resp.status_code == 200
        assert resp.headers["x-frame-options"] == "SAMEORIGIN"
        page = resp.text
        assert 'action="https://sandbox.payfast.co.za/eng/process"' in page
        assert 'name="merchant_id" value="10000100"' in page
        assert 'name="signature"' in page
        assert "passphrase" not in page
        assert "jt7NOE43FZPn" not in page

    def test_form_page_onsite_iframe(self, client, initiate, payfast_settings, monkeypatch):
        monkeypatch.setattr(payfast_settings, "PAYFAST_ONSITE_ENABLED", True)
        with patch("courtside.services.payfast_client.requests.post",
                   return_value=_onsite_response(json.dumps({"uuid": ONSITE_UUID}))):
            payment_id = initiate().json()["paymentId"]
        resp = client.get(f"/api/v1/payments/payfast/form/{payment_id}")
        assert resp.status_code == 200
        assert f"https://sandbox.payfast.co.za/onsite/payments/{ONSITE_UUID}" in resp.text
        assert "<iframe" in resp.text

    def test_form_page_without_credentials(self, client, initiate):
        payment_id = initiate().json()["paymentId"]
        resp = client.get(f"/api/v1/payments/payfast/form/{payment_id}")
        assert resp.status_code == 500

    def test_form_page_unknown_payment(self, client, payfast_settings):
        assert client.get("/api/v1/payments/payfast/form/nope").status_code == 404

    def test_return_requires_payment_id(self, client):
        assert client.get("/api/v1/payments/payfast/return").status_code == 400

    def test_return_unknown_payment(self, client):
        assert client.get("/api/v1/payments/payfast/return", params={"paymentId": "nope"}).status_code == 404

    def test_return_page(self, client, initiate):
        payment_id = initiate().json()["paymentId"]
        resp = client.get("/api/v1/payments/payfast/return", params={"paymentId": payment_id})
        assert resp.status_code == 200
        assert "Payment Processing" in resp.text
        assert "PAYFAST_RETURN" in resp.text
        assert payment_id in resp.text

    def test_cancel_page(self, client, initiate, db):
        payment_id = initiate().json()["paymentId"]
        resp = client.get("/api/v1/payments/payfast/cancel", params={"paymentId": payment_id})
        assert resp.status_code == 200
        assert "PAYFAST_CANCEL" in resp.text
        db.expire_all()
        assert db.get(Payment, payment_id).status == "cancelled"

    def test_cancel_does_not_undo_completed(self, client, initiate, payfast_settings, db):
        payment_id = initiate().json()["paymentId"]
        assert post_itn(client, itn_body(payment_id)).status_code == 200
        client.get("/api/v1/payments/payfast/cancel", params={"paymentId": payment_id})
        db.expire_all()
        assert db.get(Payment, payment_id).status == "completed"

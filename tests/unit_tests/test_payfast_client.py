"""Tests for the PayFast onsite client and payment field builder."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import requests

from courtside.services.payfast import parse_itn, verify
from courtside.services.payfast_client import (
    PAYMENT_FIELD_ORDER,
    PayFastClient,
    PayFastConfig,
    PayFastError,
    build_payment_fields,
    config_from_settings,
    format_amount,
    mask,
    signed_fields,
)


@pytest.fixture()
def cfg():
    return PayFastConfig(merchant_id="10000100", merchant_key="46f0cd694581a", passphrase="jt7NOE43FZPn", sandbox=True)


@pytest.fixture()
def fields(cfg):
    return build_payment_fields(
        cfg,
        return_url="https://api.example.com/return",
        cancel_url="https://api.example.com/cancel",
        notify_url="https://api.example.com/notify",
        email_address="jane@example.com",
        m_payment_id="pay-1",
        amount=460,
        item_name="Court 1 Booking",
        name_first="Jane",
    )


def _response(text, status_code=200):
    r = MagicMock()
    r.text = text
    r.status_code = status_code
    return r


class TestConfig:
    def test_hosts(self):
        assert PayFastConfig("1", "k", sandbox=True).process_url == "https://sandbox.payfast.co.za/eng/process"
        live = PayFastConfig("1", "k", sandbox=False)
        assert live.process_url == "https://www.payfast.co.za/eng/process"
        assert live.onsite_process_url == "https://www.payfast.co.za/onsite/process"
        assert live.onsite_payment_url("u-1") == "https://www.payfast.co.za/onsite/payments/u-1"

    def test_has_credentials(self):
        assert PayFastConfig("1", "k").has_credentials
        assert not PayFastConfig("", "k").has_credentials
        assert not PayFastConfig("1", "").has_credentials

    def test_from_settings_without_merchant_forces_sandbox(self, monkeypatch):
        from courtside.core.config import settings

        monkeypatch.setattr(settings, "PAYFAST_MERCHANT_ID", "")
        monkeypatch.setattr(settings, "PAYFAST_SANDBOX", False)
        assert config_from_settings().sandbox is True

    def test_from_settings_live(self, monkeypatch):
        from courtside.core.config import settings

        monkeypatch.setattr(settings, "PAYFAST_MERCHANT_ID", "12345")
        monkeypatch.setattr(settings, "PAYFAST_MERCHANT_KEY", "abcde")
        monkeypatch.setattr(settings, "PAYFAST_SANDBOX", False)
        cfg = config_from_settings()
        assert cfg.sandbox is False
        assert cfg.host == "www.payfast.co.za"


class TestHelpers:
    @pytest.mark.parametrize("raw,expected", [
        (460, "460.00"),
        ("460.5", "460.50"),
        (Decimal("10.005"), "10.01"),
        (0.1, "0.10"),
    ])
    def test_format_amount(self, raw, expected):
        assert format_amount(raw) == expected

    def test_mask(self):
        assert mask("10000100") == "***0100"
        assert mask("") == "MISSING"


class TestBuildPaymentFields:
    def test_documented_order(self, fields):
        assert tuple(fields) == PAYMENT_FIELD_ORDER

    def test_values(self, fields):
        assert fields["merchant_id"] == "10000100"
        assert fields["amount"] == "460.00"
        assert fields["name_last"] == ""

    def test_signed_fields_drop_blanks_and_sign_last(self, cfg, fields):
        signed = signed_fields(cfg, fields)
        assert list(signed)[-1] == "signature"
        assert "name_last" not in signed
        assert verify(signed, cfg.passphrase)


class TestGenerateOnsiteIdentifier:
    def test_returns_uuid(self, cfg, fields):
        with patch("courtside.services.payfast_client.requests.post", return_value=_response('{"uuid": "abc-123"}')) as post:
            assert PayFastClient(cfg).generate_onsite_identifier(fields) == "abc-123"

        url = post.call_args.args[0]
        kwargs = post.call_args.kwargs
        assert url == "https://sandbox.payfast.co.za/onsite/process"
        assert kwargs["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
        assert kwargs["timeout"] == cfg.timeout

        body = kwargs["data"].decode()
        assert body.endswith("&signature=" + signed_fields(cfg, fields)["signature"])
        assert "passphrase" not in body
        assert verify(parse_itn(body), cfg.passphrase)

    def test_requires_credentials(self, fields):
        client = PayFastClient(PayFastConfig(merchant_id="", merchant_key=""))
        with patch("courtside.services.payfast_client.requests.post") as post:
            with pytest.raises(PayFastError, match="credentials"):
                client.generate_onsite_identifier(fields)
        post.assert_not_called()

    def test_error_payload(self, cfg, fields):
        with patch("courtside.services.payfast_client.requests.post", return_value=_response('{"error": "Onsite not enabled"}')):
            with pytest.raises(PayFastError, match="Onsite not enabled"):
                PayFastClient(cfg).generate_onsite_identifier(fields)

    def test_non_success_status(self, cfg, fields):
        with patch("courtside.services.payfast_client.requests.post", return_value=_response('{"status": "failed"}')):
            with pytest.raises(PayFastError, match="status: failed"):
                PayFastClient(cfg).generate_onsite_identifier(fields)

    def test_missing_uuid(self, cfg, fields):
        with patch("courtside.services.payfast_client.requests.post", return_value=_response('{"status": "success"}')):
            with pytest.raises(PayFastError, match="did not return a UUID"):
                PayFastClient(cfg).generate_onsite_identifier(fields)

    @pytest.mark.parametrize("text", ["<html>Bad Gateway</html>", "[1, 2]", ""])
    def test_invalid_response(self, cfg, fields, text):
        with patch("courtside.services.payfast_client.requests.post", return_value=_response(text, 502)):
            with pytest.raises(PayFastError, match="invalid response"):
                PayFastClient(cfg).generate_onsite_identifier(fields)

    def test_network_error_wrapped(self, cfg, fields):
        with patch("courtside.services.payfast_client.requests.post", side_effect=requests.ConnectionError("boom")):
            with pytest.raises(PayFastError, match="request failed"):
                PayFastClient(cfg).generate_onsite_identifier(fields)

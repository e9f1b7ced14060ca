"""PayFast signature codec.

PayFast signs payment requests and ITN callbacks with an MD5 over the posted
fields *in the order they were posted* (not alphabetical, which is the
format of their separate REST API), with an optional shared passphrase
appended as a trailing ``passphrase`` field.

Field sets are plain dicts (insertion ordered) or sequences of
``(name, value)`` pairs.

Docs: https://developers.payfast.co.za/docs#step_2_signature
"""
from __future__ import annotations

import hashlib
import hmac
from typing import Any, Iterable, Mapping, Union
from urllib.parse import parse_qsl, quote

SIGNATURE_FIELD = "signature"
PASSPHRASE_FIELD = "passphrase"

# Same set as JavaScript's encodeURIComponent leaves untouched (plus alphanumerics)
_SAFE_CHARS = "-_.!~*'()"

FieldSet = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]

_STATUS_MAP = {
    "COMPLETE": "completed",
    "PENDING": "pending",
    "FAILED": "failed",
    "CANCELLED": "cancelled",
}


def encode_value(value: str) -> str:
    """Percent-encode one query component (space -> %20, never +)."""
    # Lone surrogates are encoded as-is so signing never raises
    return quote(value.encode("utf-8", errors="surrogatepass"), safe=_SAFE_CHARS)


def _items(fields: FieldSet) -> Iterable[tuple[str, Any]]:
    if fields is None:
        raise TypeError("fields is required")
    if isinstance(fields, Mapping):
        return fields.items()
    return fields


def _signable_pairs(fields: FieldSet) -> list[tuple[str, str]]:
    pairs = []
    for key, value in _items(fields):
        if key == SIGNATURE_FIELD or value is None:
            continue
        str_value = str(value).strip()
        if not str_value:
            continue
        pairs.append((key, str_value))
    return pairs


def _join(pairs: list[tuple[str, str]]) -> str:
    return "&".join(f"{key}={encode_value(value)}" for key, value in pairs)


def param_string(fields: FieldSet, passphrase: str | None = None) -> str:
    """The exact string that gets hashed, passphrase included."""
    out = _join(_signable_pairs(fields))
    if passphrase and passphrase.strip():
        suffix = f"{PASSPHRASE_FIELD}={encode_value(passphrase.strip())}"
        out = f"{out}&{suffix}" if out else suffix
    return out


def sign(fields: FieldSet, passphrase: str | None = None) -> str:
    return hashlib.md5(param_string(fields, passphrase).encode("utf-8", errors="surrogatepass")).hexdigest()


def verify(fields: FieldSet, passphrase: str | None = None) -> bool:
    """Check the ``signature`` entry of an inbound field set."""
    pairs = list(_items(fields))
    received = ""
    for key, value in pairs:
        if key == SIGNATURE_FIELD:
            received = str(value or "").strip()
    if not received:
        return False
    expected = sign(pairs, passphrase)
    return hmac.compare_digest(received.lower().encode("utf-8", errors="surrogatepass"), expected.encode("utf-8"))


def to_canonical_query_string(fields: FieldSet, passphrase: str | None = None) -> str:
    """Request body for PayFast: the signed fields followed by ``signature`` last.

    Uses the same filtering and encoding as :func:`sign`, so the body PayFast
    receives hashes to the signature it carries. The passphrase is never
    emitted.
    """
    pairs = _signable_pairs(fields)
    signature = sign(pairs, passphrase)
    body = _join(pairs)
    return f"{body}&{SIGNATURE_FIELD}={signature}" if body else f"{SIGNATURE_FIELD}={signature}"


def parse_itn(body: bytes | str) -> dict[str, str]:
    """Decode an ITN form body keeping PayFast's field order and blank values."""
    if isinstance(body, bytes):
        # Undecodable bytes become U+FFFD and fail verification instead of raising
        body = body.decode("utf-8", errors="replace")
    return dict(parse_qsl(body, keep_blank_values=True))


def payment_status_from_payfast(payment_status: str | None) -> str:
    return _STATUS_MAP.get((payment_status or "").strip().upper(), "pending")

"""HMAC signing and timestamp helpers for signed image urls.

A signed url authorizes access to ``url`` until ``timeExpired``. The
signature is computed over::

    <url>?timeExpired=<query-escaped RFC3339Nano timestamp>

with HMAC-SHA256 keyed by the secret api key, and travels base64
encoded (standard alphabet, padded) in the ``signature`` query parameter.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import re
from datetime import datetime, timedelta, timezone
from urllib.parse import quote_plus

from ospry.errors import URLParseError

_RFC3339_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d{1,9}))?"
    r"(?:(Z)|([+-])(\d{2}):(\d{2}))$"
)


def sign(secret_key: str, payload: str) -> bytes:
    """Return the raw HMAC-SHA256 digest of *payload* keyed by *secret_key*."""

    return hmac.new(secret_key.encode(), payload.encode(), hashlib.sha256).digest()


def encode_signature(digest: bytes) -> str:
    return base64.b64encode(digest).decode("ascii")


def signing_payload(url: str, time_expired: str) -> str:
    """Build the canonical string that gets signed for *url*.

    *time_expired* is the already formatted RFC3339Nano timestamp.
    """

    return f"{url}?timeExpired={quote_plus(time_expired)}"


def sign_url(secret_key: str, url: str, time_expired: str) -> str:
    """Return the base64 signature authorizing *url* until *time_expired*."""

    return encode_signature(sign(secret_key, signing_payload(url, time_expired)))


def format_rfc3339nano(value: datetime) -> str:
    """Format *value* in UTC, trimming trailing zeros from the fraction.

    Naive datetimes are taken to be UTC already.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    return text + "Z"


def parse_rfc3339nano(text: str) -> datetime:
    """Parse an RFC3339 timestamp with optional fractional seconds.

    Precision beyond microseconds is truncated. Raises URLParseError on
    anything that is not a valid timestamp.
    """

    match = _RFC3339_RE.match(text)
    if match is None:
        raise URLParseError(f"invalid timestamp {text!r}")
    year, month, day, hour, minute, second, fraction, zulu, direction, off_h, off_m = match.groups()
    if zulu:
        tz = timezone.utc
    else:
        offset = timedelta(hours=int(off_h), minutes=int(off_m))
        if offset >= timedelta(hours=24) or int(off_m) >= 60:
            raise URLParseError(f"invalid timestamp {text!r}")
        tz = timezone(-offset if direction == "-" else offset)
    microsecond = int((fraction or "0")[:6].ljust(6, "0"))
    try:
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), microsecond, tzinfo=tz
        )
    except ValueError as exc:
        raise URLParseError(f"invalid timestamp {text!r}: {exc}") from exc

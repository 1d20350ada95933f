"""Rendering and signing of image urls.

``format_url`` turns any image url (plain, rendered or already signed)
into a rendered url, and into a signed one when an expiration is given:

    http://foo.ospry.io/bar/baz.png?format=gif&maxHeight=120
    https://api.ospry.io/?format=gif&signature=...&timeExpired=...&url=...

Options given by the caller win over the ones already embedded in the
url; embedded ones only fill the gaps. Query keys are always emitted in
sorted order so the same input produces the same url.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from urllib.parse import SplitResult, parse_qs, urlencode, urlsplit, urlunsplit

from ospry.config import OspryConfig
from ospry.errors import RenderOptsError, URLParseError
from ospry.models import FORMATS, RenderOpts
from ospry.utils.signing import format_rfc3339nano, parse_rfc3339nano, sign_url

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"^[+-]?[0-9]+$")


def normalize(raw_url: str, opts: RenderOpts | None = None) -> tuple[RenderOpts, str]:
    """Resolve the effective options and the underlying image url.

    Returns ``(opts, image_url)``. The caller's *opts* are never mutated.
    A ``url`` query parameter marks *raw_url* as a signed url and its
    value is the underlying image; otherwise the underlying image is
    *raw_url* without its query string.
    """

    if opts is None:
        opts = RenderOpts()
    parts = _parse_url(raw_url)
    query = parse_qs(parts.query, keep_blank_values=True)

    updates: dict[str, object] = {}
    if opts.format is None and _get(query, "format"):
        updates["format"] = _get(query, "format")
    if opts.max_width is None and _get(query, "maxWidth"):
        updates["max_width"] = _parse_int("maxWidth", _get(query, "maxWidth"))
    if opts.max_height is None and _get(query, "maxHeight"):
        updates["max_height"] = _parse_int("maxHeight", _get(query, "maxHeight"))
    if opts.time_expired is None and _get(query, "timeExpired"):
        updates["time_expired"] = parse_rfc3339nano(_get(query, "timeExpired"))
    opts = opts.model_copy(update=updates)

    image_url = _get(query, "url")
    if image_url:
        _parse_url(image_url)
    else:
        image_url = urlunsplit(parts._replace(query=""))

    _validate(opts)
    return _canonical(opts), image_url


def build(image_url: str, opts: RenderOpts, config: OspryConfig) -> str:
    """Assemble the final url for *image_url* rendered with *opts*.

    With ``opts.time_expired`` set the url is signed with ``config.key``
    and served from ``config.render_host``; otherwise the options are put
    on *image_url* itself, replacing whatever query it had.
    """

    _validate(opts)
    query: dict[str, str] = {}
    if opts.time_expired is not None:
        time_expired = format_rfc3339nano(opts.time_expired)
        query["signature"] = sign_url(config.key, image_url, time_expired)
        query["timeExpired"] = time_expired
        query["url"] = image_url
        base = SplitResult("https", config.render_host, "/", "", "")
    else:
        base = _parse_url(image_url)

    if opts.format:
        query["format"] = opts.format
    if opts.max_height:
        query["maxHeight"] = str(opts.max_height)
    if opts.max_width:
        query["maxWidth"] = str(opts.max_width)

    url = urlunsplit(base._replace(query=urlencode(sorted(query.items()))))
    logger.debug("Formatted %s (signed=%s)", image_url, opts.time_expired is not None)
    return url


def format_url(raw_url: str, opts: RenderOpts | None, config: OspryConfig) -> str:
    """Render *raw_url* with *opts*, signing it when an expiration is set."""

    effective, image_url = normalize(raw_url, opts)
    return build(image_url, effective, config)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _parse_url(raw_url: str) -> SplitResult:
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in raw_url):
        raise URLParseError(f"invalid control character in url {raw_url!r}")
    try:
        parts = urlsplit(raw_url)
        parts.port  # raises on a non-numeric port
    except ValueError as exc:
        raise URLParseError(f"invalid url {raw_url!r}: {exc}") from exc
    return parts


def _get(query: dict[str, list[str]], key: str) -> str:
    values = query.get(key)
    return values[0] if values else ""


def _parse_int(name: str, value: str) -> int:
    if not _INT_RE.match(value):
        raise URLParseError(f"invalid {name} {value!r}")
    return int(value)


def _validate(opts: RenderOpts) -> None:
    if opts.max_height is not None and opts.max_height < 0:
        raise RenderOptsError("max_height can't be negative")
    if opts.max_width is not None and opts.max_width < 0:
        raise RenderOptsError("max_width can't be negative")
    if opts.format and opts.format not in FORMATS:
        raise RenderOptsError(f"invalid format {opts.format}")


def _canonical(opts: RenderOpts) -> RenderOpts:
    # 0 and "" carry no constraint once merged; fold them into None and
    # keep expirations in UTC so a rebuilt url normalizes to equal opts.
    time_expired = opts.time_expired
    if time_expired is not None:
        if time_expired.tzinfo is None:
            time_expired = time_expired.replace(tzinfo=timezone.utc)
        time_expired = time_expired.astimezone(timezone.utc)
    return opts.model_copy(
        update={
            "format": opts.format or None,
            "max_height": opts.max_height or None,
            "max_width": opts.max_width or None,
            "time_expired": time_expired,
        }
    )


def expires_in(seconds: float) -> datetime:
    """Expiration timestamp *seconds* from now, in UTC."""

    return datetime.now(timezone.utc) + timedelta(seconds=seconds)

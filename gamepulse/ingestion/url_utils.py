"""URL helpers for feed-item dedup and source naming."""

from __future__ import annotations

from typing import Iterable, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse


TRACKING_QUERY_PARAMS = {
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "utm_id",
    "gclid",
    "fbclid",
    "mc_cid",
    "mc_eid",
    "ref",
    "ref_src",
    # feedburner / social share suffixes seen on gaming outlets
    "cmpid",
    "ftag",
    "icid",
}


def canonicalize_url(url: Optional[str], *, strip_params: Optional[Iterable[str]] = None) -> str:
    """Identity form of a feed link.

    Scheme and host are lowercased, the fragment is dropped and tracking
    parameters are removed; remaining parameters keep their relative order.
    Non-URL text is returned trimmed.
    """
    raw = (url or "").strip()
    if not raw:
        return ""
    strip = {p.lower() for p in strip_params} if strip_params is not None else TRACKING_QUERY_PARAMS
    p = urlparse(raw)
    if not p.netloc:
        return raw
    kept = [(k, v) for k, v in parse_qsl(p.query, keep_blank_values=True) if k.lower() not in strip]
    return urlunparse(((p.scheme or "https").lower(), p.netloc.lower(), p.path or "/", p.params, urlencode(kept), ""))


def source_domain(url: Optional[str]) -> str:
    """Host name without `www.`, or "" when `url` has none."""
    try:
        host = (urlparse((url or "").strip()).netloc or "").lower()
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


def is_http_url(url: Optional[str]) -> bool:
    try:
        p = urlparse((url or "").strip())
    except ValueError:
        return False
    return p.scheme in ("http", "https") and bool(p.netloc)

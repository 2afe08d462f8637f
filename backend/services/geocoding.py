"""Lightweight geocoding helpers shared by every upstream provider.

Holds the pooled HTTP session, the request helpers that turn any transport,
status or decoding failure into ``None``, and the forward (text -> coordinate)
lookup backed by the Open-Meteo geocoding API.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

import requests

from domain.models import GeoResult
from settings import settings

OPEN_METEO_SEARCH_URL = "https://geocoding-api.open-meteo.com/v1/search"
logger = logging.getLogger(__name__)
_thread_state = threading.local()


def get_session() -> requests.Session:
    """Pooled session for the calling thread; Session objects are not shared across threads."""
    session = getattr(_thread_state, "session", None)
    if session is None:
        session = requests.Session()
        _thread_state.session = session
    return session


def build_headers(*, accept_json: bool = False, user_agent: Optional[str] = None) -> dict[str, str]:
    """Headers for an upstream call; the User-Agent identifies this app."""
    ua = settings.GEOCODER_USER_AGENT if user_agent is None else user_agent
    headers: dict[str, str] = {}
    if ua:
        headers["User-Agent"] = ua
    if accept_json:
        headers["Accept"] = "application/json"
    return headers


def _decode(resp: requests.Response, label: str) -> Optional[Any]:
    if resp is None:
        return None
    if not resp.ok:
        logger.debug("%s returned HTTP %s", label, resp.status_code)
        return None
    try:
        return resp.json()
    except ValueError as exc:
        logger.debug("%s JSON error: %s", label, exc)
        return None


def get_json(
    url: str,
    *,
    params: dict[str, Any],
    headers: Optional[dict[str, str]] = None,
    label: str,
) -> Optional[Any]:
    """GET ``url`` and return the decoded body, or None on any failure."""
    try:
        resp = get_session().get(url, params=params, headers=headers, timeout=settings.GEOCODER_HTTP_TIMEOUT)
    except requests.RequestException as exc:
        logger.debug("%s request error: %s", label, exc)
        return None
    return _decode(resp, label)


def post_form_json(
    url: str,
    *,
    data: dict[str, str],
    headers: Optional[dict[str, str]] = None,
    label: str,
) -> Optional[Any]:
    """POST a form-encoded body and return the decoded response, or None."""
    try:
        resp = get_session().post(url, data=data, headers=headers, timeout=settings.GEOCODER_HTTP_TIMEOUT)
    except requests.RequestException as exc:
        logger.debug("%s request error: %s", label, exc)
        return None
    return _decode(resp, label)


def clean_text(value: Any) -> Optional[str]:
    """Coerce a scalar JSON value to a stripped string; blanks become None."""
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text or None


def forward_geocode(query: str) -> Optional[GeoResult]:
    """Resolve a free-text place name to its top-ranked match.

    Returns None for a blank query, when nothing matches, or on network or
    parsing errors.
    """
    if not query or not query.strip():
        return None

    params = {
        "name": query.strip(),
        "count": "1",
        "language": "en",
        "format": "json",
    }
    data = get_json(OPEN_METEO_SEARCH_URL, params=params, label="Open-Meteo search")
    if not isinstance(data, dict):
        return None

    results = data.get("results") or []
    item = results[0] if isinstance(results, list) and results else None
    if not isinstance(item, dict):
        return None

    try:
        lat = float(item["latitude"])
        lon = float(item["longitude"])
    except (KeyError, TypeError, ValueError) as exc:
        logger.debug("Open-Meteo search result without coordinates for %r: %s", query, exc)
        return None

    return GeoResult(
        lat=lat,
        lon=lon,
        name=clean_text(item.get("name")) or query.strip(),
        state=clean_text(item.get("admin1")) or clean_text(item.get("admin2")),
        country=clean_text(item.get("country")),
    )

"""Approximate caller location from the public IP address (ipapi.co)."""

from __future__ import annotations

import logging
from typing import Optional

from domain.models import IpLocation
from services.geocoding import build_headers, clean_text, get_json

IPAPI_URL = "https://ipapi.co/json/"
IPAPI_IP_URL = "https://ipapi.co/{ip}/json/"
logger = logging.getLogger(__name__)


def _coordinate(data: dict, *keys: str) -> float:
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return float(value)
    raise ValueError(f"none of {keys} present")


def ip_geolocation(ip: Optional[str] = None) -> Optional[IpLocation]:
    """Return the IP-based location of ``ip``, or None when unavailable.

    Without an address ipapi.co locates the address the request comes from,
    i.e. this server's own egress IP.
    """
    url = IPAPI_IP_URL.format(ip=ip) if ip else IPAPI_URL
    data = get_json(url, params={}, headers=build_headers(), label="ipapi lookup")
    if not isinstance(data, dict):
        return None

    try:
        lat = _coordinate(data, "latitude", "lat")
        lon = _coordinate(data, "longitude", "lon")
    except (TypeError, ValueError):
        logger.debug("ipapi lookup returned no coordinates: %s", data.get("reason") or data.get("error"))
        return None

    return IpLocation(
        lat=lat,
        lon=lon,
        city=clean_text(data.get("city")),
        region=clean_text(data.get("region")) or clean_text(data.get("region_code")),
        country=clean_text(data.get("country_name")) or clean_text(data.get("country")),
        postal=clean_text(data.get("postal")),
    )

"""
Overpass postcode search.

Looks for ``addr:postcode`` tags on map features around a point, widening the
search radius until something turns up.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterator, List, Optional, Sequence

from services.geocoding import build_headers, clean_text, post_form_json
from services.postcodes import DEFAULT_POSTCODE_FORMAT, PostcodeFormat, normalize_postcode

logger = logging.getLogger(__name__)

OVERPASS_INTERPRETER_URL = "https://overpass-api.de/api/interpreter"
DEFAULT_RADII_M: tuple = (600, 1200, 2000, 3000, 5000)
DEFAULT_QUERY_TIMEOUT_SEC = 25


def build_postcode_query(lat: float, lon: float, radius_m: int, timeout_sec: int = DEFAULT_QUERY_TIMEOUT_SEC) -> str:
    """Overpass QL selecting nodes/ways/relations with a postcode near the point."""
    around = f"around:{radius_m},{lat},{lon}"
    return (
        f"[out:json][timeout:{timeout_sec}];\n"
        "(\n"
        f'  node["addr:postcode"]({around});\n'
        f'  way["addr:postcode"]({around});\n'
        f'  relation["addr:postcode"]({around});\n'
        ");\n"
        "out tags;"
    )


def iter_postcodes(data: Any) -> Iterator[str]:
    """Yield ``addr:postcode`` values in response order."""
    if not isinstance(data, dict):
        return
    elements = data.get("elements")
    if not isinstance(elements, list):
        return
    for element in elements:
        tags = element.get("tags") if isinstance(element, dict) else None
        if not isinstance(tags, dict):
            continue
        postcode = clean_text(tags.get("addr:postcode"))
        if postcode:
            yield postcode


def pick_postcode(
    candidates: Sequence[str],
    preferred_postcode: Optional[str] = None,
    postcode_format: PostcodeFormat = DEFAULT_POSTCODE_FORMAT,
) -> Optional[str]:
    """First candidate matching the preferred postcode, else the first candidate."""
    if not candidates:
        return None
    wanted = normalize_postcode(preferred_postcode, postcode_format)
    if wanted:
        for candidate in candidates:
            if normalize_postcode(candidate, postcode_format) == wanted:
                return candidate
    return candidates[0]


class OverpassPostcodeSearch:
    def __init__(
        self,
        url: str = OVERPASS_INTERPRETER_URL,
        radii_m: Sequence[int] = DEFAULT_RADII_M,
        query_timeout_sec: int = DEFAULT_QUERY_TIMEOUT_SEC,
        postcode_format: PostcodeFormat = DEFAULT_POSTCODE_FORMAT,
    ):
        if not radii_m:
            raise ValueError("at least one search radius is required")
        self.url = url
        self.radii_m = tuple(radii_m)
        self.query_timeout_sec = query_timeout_sec
        self.postcode_format = postcode_format

    def _search_radius(self, lat: float, lon: float, radius_m: int) -> List[str]:
        data = post_form_json(
            self.url,
            data={"data": build_postcode_query(lat, lon, radius_m, self.query_timeout_sec)},
            headers=build_headers(),
            label=f"Overpass r={radius_m} lat={lat} lon={lon}",
        )
        return list(iter_postcodes(data))

    def find_postcode(
        self,
        lat: float,
        lon: float,
        preferred_postcode: Optional[str] = None,
    ) -> Optional[str]:
        """Escalate through the radii; stop at the first one with any postcode.

        Returns None once every radius came back failed or empty.
        """
        for radius in self.radii_m:
            candidates = self._search_radius(lat, lon, radius)
            if candidates:
                return self._pick(candidates, preferred_postcode, radius, lat, lon)
        return None

    async def find_postcode_async(
        self,
        lat: float,
        lon: float,
        preferred_postcode: Optional[str] = None,
    ) -> Optional[str]:
        """Same escalation as find_postcode, one worker-thread call per radius.

        Cancelling the coroutine stops the escalation before the next radius
        is queried; a request already in flight is left to finish.
        """
        for radius in self.radii_m:
            candidates = await asyncio.to_thread(self._search_radius, lat, lon, radius)
            if candidates:
                return self._pick(candidates, preferred_postcode, radius, lat, lon)
        return None

    def _pick(
        self,
        candidates: List[str],
        preferred_postcode: Optional[str],
        radius: int,
        lat: float,
        lon: float,
    ) -> Optional[str]:
        postcode = pick_postcode(candidates, preferred_postcode, self.postcode_format)
        logger.debug(
            "Overpass found %d postcodes at r=%sm for lat=%s lon=%s, picked %s",
            len(candidates),
            radius,
            lat,
            lon,
            postcode,
        )
        return postcode

"""
Known postcode areas.

Geofenced corrections for coordinates where public map data is known to carry
a wrong or missing postcode. The table is handed to the aggregator so it can be
swapped per deployment (see ``KNOWN_POSTCODE_AREAS_PATH``).
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from domain.models import KnownPostcodeArea

logger = logging.getLogger(__name__)

DEFAULT_KNOWN_AREAS: tuple = (
    # Narsingi, Hyderabad
    KnownPostcodeArea(lat_min=17.33, lat_max=17.37, lon_min=78.32, lon_max=78.36, postcode="500075"),
)

_REQUIRED_KEYS = ("lat_min", "lat_max", "lon_min", "lon_max", "postcode")


class KnownAreaOverride:
    """Linear lookup over an ordered list of bounding boxes."""

    def __init__(self, areas: Optional[Iterable[KnownPostcodeArea]] = None):
        self.areas: tuple = tuple(DEFAULT_KNOWN_AREAS if areas is None else areas)

    def lookup(self, lat: float, lon: float) -> Optional[str]:
        """Return the postcode of the first box containing the point."""
        for area in self.areas:
            if area.contains(lat, lon):
                return area.postcode
        return None


def _parse_area(entry: dict, index: int) -> KnownPostcodeArea:
    if not isinstance(entry, dict):
        raise ValueError(f"known area #{index} must be an object")
    missing = [k for k in _REQUIRED_KEYS if k not in entry]
    if missing:
        raise ValueError(f"known area #{index} is missing {', '.join(missing)}")
    postcode = entry["postcode"]
    if isinstance(postcode, bool) or not isinstance(postcode, (str, int)):
        raise ValueError(f"known area #{index} has an invalid postcode: {postcode!r}")
    try:
        area = KnownPostcodeArea(
            lat_min=float(entry["lat_min"]),
            lat_max=float(entry["lat_max"]),
            lon_min=float(entry["lon_min"]),
            lon_max=float(entry["lon_max"]),
            postcode=str(postcode).strip(),
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"known area #{index} has a non-numeric bound: {exc}") from exc
    if area.lat_min > area.lat_max or area.lon_min > area.lon_max:
        raise ValueError(f"known area #{index} has inverted bounds")
    if not area.postcode:
        raise ValueError(f"known area #{index} has an empty postcode")
    return area


def load_known_areas(path: str) -> List[KnownPostcodeArea]:
    """
    Load a JSON list of areas.

    Args:
        path: File holding ``[{"lat_min": .., "lat_max": .., "lon_min": ..,
            "lon_max": .., "postcode": ".."}, ...]``.

    Returns:
        The areas in file order.
    """
    with Path(path).open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of known areas")
    areas = [_parse_area(entry, i) for i, entry in enumerate(data)]
    logger.info("Loaded %d known postcode areas from %s", len(areas), path)
    return areas


def build_known_area_override(path: Optional[str] = None) -> KnownAreaOverride:
    """Use the file at ``path`` when given, else the built-in table."""
    areas = load_known_areas(path) if path else list(DEFAULT_KNOWN_AREAS)
    return KnownAreaOverride(areas)

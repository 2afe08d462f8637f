"""
Reverse geocoding clients for Photon, Nominatim and BigDataCloud.

Each upstream exposes its own administrative taxonomy, so every provider has
its own fallback order per field. The orders live in the ``*_KEYS`` tuples
below and are applied by pure ``extract_*_fragment`` functions; the client
classes only add the HTTP call.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence, Union

from domain.models import ProviderPlaceFragment
from services.geocoding import build_headers, clean_text, get_json

logger = logging.getLogger(__name__)

PHOTON_REVERSE_URL = "https://photon.komoot.io/reverse"
NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"
BIGDATACLOUD_REVERSE_URL = "https://api.bigdatacloud.net/data/reverse-geocode-client"

Selector = Union[str, Callable[[dict], Any]]


def first_present(source: dict, selectors: Sequence[Selector]) -> Optional[str]:
    """Return the first non-blank value picked by ``selectors``.

    A selector is either a key of ``source`` or a function of ``source``.
    """
    for selector in selectors:
        value = selector(source) if callable(selector) else source.get(selector)
        text = clean_text(value)
        if text:
            return text
    return None


def upper(key: str) -> Callable[[dict], Optional[str]]:
    def select(source: dict) -> Optional[str]:
        text = clean_text(source.get(key))
        return text.upper() if text else None

    return select


def _locality_info(source: dict, kind: str) -> list:
    info = source.get("localityInfo")
    entries = info.get(kind) if isinstance(info, dict) else None
    if not isinstance(entries, list):
        return []
    return [e for e in entries if isinstance(e, dict)]


def locality_entry(kind: str, index: int) -> Callable[[dict], Optional[str]]:
    """Name of the n-th ``localityInfo.<kind>`` entry (BigDataCloud)."""

    def select(source: dict) -> Optional[str]:
        entries = _locality_info(source, kind)
        return entries[index].get("name") if len(entries) > index else None

    return select


def admin_level(level: int) -> Callable[[dict], Optional[str]]:
    """Name of the administrative entry at ``adminLevel == level`` (BigDataCloud)."""

    def select(source: dict) -> Optional[str]:
        for entry in _locality_info(source, "administrative"):
            if entry.get("adminLevel") == level:
                return entry.get("name")
        return None

    return select


# Nominatim, looked up in the ``address`` object.
NOMINATIM_NAME_KEYS: tuple = (
    "neighbourhood", "suburb", "municipality", "town", "village", "city", "hamlet", "quarter",
)
NOMINATIM_TOWN_KEYS: tuple = ("city", "town", "village", "municipality", "hamlet")
NOMINATIM_DISTRICT_KEYS: tuple = ("state_district", "county", "city_district")
NOMINATIM_STATE_KEYS: tuple = ("state", "region", "province")
NOMINATIM_COUNTRY_KEYS: tuple = ("country", upper("country_code"))
NOMINATIM_POSTCODE_KEYS: tuple = ("postcode",)

# Photon, looked up in ``features[0].properties``.
PHOTON_NAME_KEYS: tuple = ("locality", "district", "name", "city")
PHOTON_TOWN_KEYS: tuple = ("city", "town", "village")
PHOTON_DISTRICT_KEYS: tuple = ("county", "district")
PHOTON_STATE_KEYS: tuple = ("state",)
PHOTON_COUNTRY_KEYS: tuple = ("country", upper("countrycode"))
PHOTON_POSTCODE_KEYS: tuple = ("postcode",)

# BigDataCloud, looked up in the top-level object.
BIGDATACLOUD_NAME_KEYS: tuple = (
    "locality",
    "city",
    locality_entry("informative", 0),
    "principalSubdivisionLocality",
    locality_entry("administrative", 0),
)
BIGDATACLOUD_TOWN_KEYS: tuple = ("city", "locality")
BIGDATACLOUD_DISTRICT_KEYS: tuple = (admin_level(5), admin_level(6))
BIGDATACLOUD_STATE_KEYS: tuple = ("principalSubdivision", admin_level(4), admin_level(5))
BIGDATACLOUD_COUNTRY_KEYS: tuple = ("countryName", "countryCode")
BIGDATACLOUD_POSTCODE_KEYS: tuple = ("postcode", "postalCode")


def _fragment(
    source: dict,
    name: Sequence[Selector],
    town: Sequence[Selector],
    district: Sequence[Selector],
    state: Sequence[Selector],
    country: Sequence[Selector],
    postcode: Sequence[Selector],
) -> Optional[ProviderPlaceFragment]:
    fragment = ProviderPlaceFragment(
        name=first_present(source, name),
        town=first_present(source, town),
        district=first_present(source, district),
        state=first_present(source, state),
        country=first_present(source, country),
        postcode=first_present(source, postcode),
    )
    return None if fragment.is_empty else fragment


def extract_nominatim_fragment(data: Any) -> Optional[ProviderPlaceFragment]:
    if not isinstance(data, dict):
        return None
    address = data.get("address")
    if not isinstance(address, dict):
        return None
    return _fragment(
        address,
        NOMINATIM_NAME_KEYS,
        NOMINATIM_TOWN_KEYS,
        NOMINATIM_DISTRICT_KEYS,
        NOMINATIM_STATE_KEYS,
        NOMINATIM_COUNTRY_KEYS,
        NOMINATIM_POSTCODE_KEYS,
    )


def extract_photon_fragment(data: Any) -> Optional[ProviderPlaceFragment]:
    if not isinstance(data, dict):
        return None
    features = data.get("features")
    if not isinstance(features, list) or not features or not isinstance(features[0], dict):
        return None
    properties = features[0].get("properties")
    if not isinstance(properties, dict):
        return None
    return _fragment(
        properties,
        PHOTON_NAME_KEYS,
        PHOTON_TOWN_KEYS,
        PHOTON_DISTRICT_KEYS,
        PHOTON_STATE_KEYS,
        PHOTON_COUNTRY_KEYS,
        PHOTON_POSTCODE_KEYS,
    )


def extract_bigdatacloud_fragment(data: Any) -> Optional[ProviderPlaceFragment]:
    if not isinstance(data, dict):
        return None
    return _fragment(
        data,
        BIGDATACLOUD_NAME_KEYS,
        BIGDATACLOUD_TOWN_KEYS,
        BIGDATACLOUD_DISTRICT_KEYS,
        BIGDATACLOUD_STATE_KEYS,
        BIGDATACLOUD_COUNTRY_KEYS,
        BIGDATACLOUD_POSTCODE_KEYS,
    )


class ReverseGeocodeClient:
    """One HTTP GET against a provider's reverse endpoint.

    Any failure (transport, status, body) yields None; nothing is raised.
    """

    provider = "base"
    default_url = ""

    def __init__(self, base_url: Optional[str] = None, user_agent: Optional[str] = None):
        self.base_url = base_url or self.default_url
        self.user_agent = user_agent

    def build_params(self, lat: float, lon: float) -> dict[str, str]:
        raise NotImplementedError

    def build_headers(self) -> dict[str, str]:
        return build_headers(user_agent=self.user_agent)

    def extract(self, data: Any) -> Optional[ProviderPlaceFragment]:
        raise NotImplementedError

    def reverse(self, lat: float, lon: float) -> Optional[ProviderPlaceFragment]:
        data = get_json(
            self.base_url,
            params=self.build_params(lat, lon),
            headers=self.build_headers(),
            label=f"{self.provider} reverse lat={lat} lon={lon}",
        )
        if data is None:
            return None
        fragment = self.extract(data)
        if fragment is None:
            logger.debug("%s reverse lat=%s lon=%s: no usable fields", self.provider, lat, lon)
        return fragment


class PhotonClient(ReverseGeocodeClient):
    provider = "photon"
    default_url = PHOTON_REVERSE_URL

    def build_params(self, lat: float, lon: float) -> dict[str, str]:
        return {"lat": str(lat), "lon": str(lon), "lang": "en"}

    def extract(self, data: Any) -> Optional[ProviderPlaceFragment]:
        return extract_photon_fragment(data)


class NominatimClient(ReverseGeocodeClient):
    provider = "nominatim"
    default_url = NOMINATIM_REVERSE_URL

    def build_params(self, lat: float, lon: float) -> dict[str, str]:
        return {
            "format": "jsonv2",
            "lat": str(lat),
            "lon": str(lon),
            "addressdetails": "1",
            "zoom": "18",
        }

    def build_headers(self) -> dict[str, str]:
        return build_headers(accept_json=True, user_agent=self.user_agent)

    def extract(self, data: Any) -> Optional[ProviderPlaceFragment]:
        return extract_nominatim_fragment(data)

    def reverse(self, lat: float, lon: float) -> Optional[ProviderPlaceFragment]:
        # Nominatim's usage policy forbids anonymous requests.
        if "User-Agent" not in self.build_headers():
            logger.warning("No User-Agent configured; skipping Nominatim reverse geocode.")
            return None
        return super().reverse(lat, lon)


class BigDataCloudClient(ReverseGeocodeClient):
    provider = "bigdatacloud"
    default_url = BIGDATACLOUD_REVERSE_URL

    def build_params(self, lat: float, lon: float) -> dict[str, str]:
        return {"latitude": str(lat), "longitude": str(lon), "localityLanguage": "en"}

    def build_headers(self) -> dict[str, str]:
        return {}

    def extract(self, data: Any) -> Optional[ProviderPlaceFragment]:
        return extract_bigdatacloud_fragment(data)

"""
Reverse geocoding aggregation.

Queries Photon, Nominatim, BigDataCloud and the Overpass postcode search at the
same time, waits for every one of them to settle, and merges whatever came back
into a single PlaceRecord. Any subset of providers may fail; only when all of
them come back empty is the result None.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Sequence

from domain.models import PlaceRecord, ProviderPlaceFragment
from services.geocoding_providers import BigDataCloudClient, NominatimClient, PhotonClient
from services.known_areas import KnownAreaOverride, build_known_area_override
from services.overpass import OverpassPostcodeSearch
from services.postcodes import DEFAULT_POSTCODE_FORMAT, PostcodeFormat, normalize_postcode
from settings import settings

logger = logging.getLogger(__name__)

_EMPTY = ProviderPlaceFragment.empty()


def _first(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


def resolve_postcode(
    known_postcode: Optional[str],
    overpass_postcode: Optional[str],
    provider_postcodes: Sequence[Optional[str]],
    postcode_format: PostcodeFormat = DEFAULT_POSTCODE_FORMAT,
) -> Optional[str]:
    """
    Pick the postcode for a merged record.

    Priority:
    1. the known-area override, unconditionally;
    2. the Overpass postcode if it is in the preferred format;
    3. the first provider postcode in the preferred format;
    4. the Overpass postcode in any format;
    5. the first provider postcode in any format.

    Args:
        known_postcode: Postcode from the known-area table, if any.
        overpass_postcode: Raw postcode found by the Overpass search.
        provider_postcodes: Raw provider postcodes in precedence order
            (Photon, Nominatim, BigDataCloud).
        postcode_format: Preferred regional format.
    """
    if known_postcode:
        return known_postcode

    overpass = normalize_postcode(overpass_postcode, postcode_format)
    providers = [normalize_postcode(p, postcode_format) for p in provider_postcodes]

    if postcode_format.matches(overpass):
        return overpass
    for postcode in providers:
        if postcode_format.matches(postcode):
            return postcode
    return _first(overpass, *providers)


def merge_place_fragments(
    photon: Optional[ProviderPlaceFragment],
    nominatim: Optional[ProviderPlaceFragment],
    bigdatacloud: Optional[ProviderPlaceFragment],
    overpass_postcode: Optional[str] = None,
    known_postcode: Optional[str] = None,
    postcode_format: PostcodeFormat = DEFAULT_POSTCODE_FORMAT,
) -> Optional[PlaceRecord]:
    """Merge provider fragments field by field, first non-empty value wins.

    Locality fields prefer Photon; administrative fields prefer Nominatim.
    Missing providers count as empty fragments.
    """
    photon = photon or _EMPTY
    nominatim = nominatim or _EMPTY
    bigdatacloud = bigdatacloud or _EMPTY

    name = _first(photon.name, nominatim.name, bigdatacloud.name)
    record = PlaceRecord(
        name=name,
        town=_first(photon.town, nominatim.town, bigdatacloud.town, name),
        district=_first(nominatim.district, photon.district, bigdatacloud.district),
        state=_first(nominatim.state, photon.state, bigdatacloud.state),
        country=_first(nominatim.country, photon.country, bigdatacloud.country),
        postcode=resolve_postcode(
            known_postcode,
            overpass_postcode,
            [photon.postcode, nominatim.postcode, bigdatacloud.postcode],
            postcode_format,
        ),
    )
    return None if record.is_empty else record


class ReverseGeocodeAggregator:
    """Fan-out/fan-in over every reverse geocoding source.

    Collaborators are injected so tests and deployments can swap them; the
    defaults talk to the public services.
    """

    def __init__(
        self,
        photon: Optional[PhotonClient] = None,
        nominatim: Optional[NominatimClient] = None,
        bigdatacloud: Optional[BigDataCloudClient] = None,
        overpass: Optional[OverpassPostcodeSearch] = None,
        known_areas: Optional[KnownAreaOverride] = None,
        postcode_format: PostcodeFormat = DEFAULT_POSTCODE_FORMAT,
    ):
        self.photon = photon or PhotonClient()
        self.nominatim = nominatim or NominatimClient()
        self.bigdatacloud = bigdatacloud or BigDataCloudClient()
        self.overpass = overpass or OverpassPostcodeSearch(postcode_format=postcode_format)
        self.known_areas = known_areas or KnownAreaOverride()
        self.postcode_format = postcode_format

    @staticmethod
    def _settled(source: str, outcome: Any, lat: float, lon: float) -> Any:
        """Turn an exception returned by gather() into an absent result."""
        if isinstance(outcome, BaseException):
            logger.warning("%s lookup failed for lat=%s lon=%s: %r", source, lat, lon, outcome)
            return None
        return outcome

    async def reverse_geocode(self, lat: float, lon: float) -> Optional[PlaceRecord]:
        known_postcode = self.known_areas.lookup(lat, lon)

        outcomes = await asyncio.gather(
            asyncio.to_thread(self.photon.reverse, lat, lon),
            asyncio.to_thread(self.nominatim.reverse, lat, lon),
            asyncio.to_thread(self.bigdatacloud.reverse, lat, lon),
            self.overpass.find_postcode_async(lat, lon, known_postcode),
            return_exceptions=True,
        )
        photon, nominatim, bigdatacloud, overpass_postcode = (
            self._settled(source, outcome, lat, lon)
            for source, outcome in zip(("photon", "nominatim", "bigdatacloud", "overpass"), outcomes)
        )

        logger.debug(
            "Reverse geocode lat=%s lon=%s: photon=%s nominatim=%s bigdatacloud=%s overpass=%s known=%s",
            lat,
            lon,
            photon is not None,
            nominatim is not None,
            bigdatacloud is not None,
            overpass_postcode,
            known_postcode,
        )

        return merge_place_fragments(
            photon,
            nominatim,
            bigdatacloud,
            overpass_postcode=overpass_postcode,
            known_postcode=known_postcode,
            postcode_format=self.postcode_format,
        )


_default_aggregator: Optional[ReverseGeocodeAggregator] = None


def build_default_aggregator() -> ReverseGeocodeAggregator:
    """Wire an aggregator from the environment settings."""
    postcode_format = PostcodeFormat(settings.POSTCODE_DIGITS)
    return ReverseGeocodeAggregator(
        overpass=OverpassPostcodeSearch(
            radii_m=settings.OVERPASS_RADII_M,
            query_timeout_sec=settings.OVERPASS_QUERY_TIMEOUT,
            postcode_format=postcode_format,
        ),
        known_areas=build_known_area_override(settings.KNOWN_POSTCODE_AREAS_PATH),
        postcode_format=postcode_format,
    )


def get_default_aggregator() -> ReverseGeocodeAggregator:
    global _default_aggregator
    if _default_aggregator is None:
        _default_aggregator = build_default_aggregator()
    return _default_aggregator


def reverse_geocode(lat: float, lon: float) -> Optional[PlaceRecord]:
    """Blocking wrapper around the aggregator for scripts and sync callers."""
    return asyncio.run(get_default_aggregator().reverse_geocode(lat, lon))

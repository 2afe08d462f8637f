"""
Geocoding API routes.
"""
import ipaddress
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from domain.models import GeoResult, IpLocation, PlaceRecord
from services.geocoding import forward_geocode
from services.ip_location import ip_geolocation
from services.reverse_geocoder import get_default_aggregator

router = APIRouter()
logger = logging.getLogger(__name__)


class PlaceRecordResponse(BaseModel):
    name: Optional[str] = None
    town: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postcode: Optional[str] = None
    label: Optional[str] = None


class GeoResultResponse(BaseModel):
    lat: float
    lon: float
    name: str
    state: Optional[str] = None
    country: Optional[str] = None


class IpLocationResponse(BaseModel):
    lat: float
    lon: float
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    postal: Optional[str] = None


def place_to_response(place: PlaceRecord) -> PlaceRecordResponse:
    """Convert domain PlaceRecord to API response."""
    return PlaceRecordResponse(
        name=place.name,
        town=place.town,
        district=place.district,
        state=place.state,
        country=place.country,
        postcode=place.postcode,
        label=place.display_label,
    )


@router.get("/reverse", response_model=PlaceRecordResponse)
async def reverse(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
):
    """Resolve a coordinate to the best merged place description."""
    place = await get_default_aggregator().reverse_geocode(lat, lon)
    if place is None:
        raise HTTPException(status_code=404, detail="No place found for these coordinates")
    return place_to_response(place)


@router.get("/forward", response_model=GeoResultResponse)
def forward(q: str = Query(..., min_length=1)):
    """Resolve a free-text place name to coordinates."""
    result: Optional[GeoResult] = forward_geocode(q)
    if result is None:
        raise HTTPException(status_code=404, detail="Place not found")
    return GeoResultResponse(
        lat=result.lat,
        lon=result.lon,
        name=result.name,
        state=result.state,
        country=result.country,
    )


def client_ip(request: Request) -> Optional[str]:
    """Public address of the caller: first X-Forwarded-For hop, else the socket peer.

    Loopback, private and malformed addresses give None.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    candidate = forwarded.split(",")[0].strip() or (request.client.host if request.client else "")
    try:
        address = ipaddress.ip_address(candidate)
    except ValueError:
        return None
    return str(address) if address.is_global else None


@router.get("/ip", response_model=IpLocationResponse)
def ip_location(request: Request):
    """Approximate location of the calling client, used as a first guess.

    A caller without a public address (local development) is located by the
    server's own egress IP instead.
    """
    loc: Optional[IpLocation] = ip_geolocation(client_ip(request))
    if loc is None:
        raise HTTPException(status_code=404, detail="IP location unavailable")
    return IpLocationResponse(
        lat=loc.lat,
        lon=loc.lon,
        city=loc.city,
        region=loc.region,
        country=loc.country,
        postal=loc.postal,
    )

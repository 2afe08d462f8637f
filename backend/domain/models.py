"""
Core domain models for the geocoding backend.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, fields
from typing import Optional


@dataclass(frozen=True)
class GeoQuery:
    """A coordinate pair to resolve. Range checks are left to the caller."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class ProviderPlaceFragment:
    """One provider's partial view of a place. Any field may be missing."""
    name: Optional[str] = None
    town: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postcode: Optional[str] = None  # raw, as the provider returned it

    @classmethod
    def empty(cls) -> "ProviderPlaceFragment":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))


@dataclass(frozen=True)
class KnownPostcodeArea:
    """Bounding box with a ground-truth postcode for a misresolved area."""
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float
    postcode: str

    def contains(self, lat: float, lon: float) -> bool:
        return self.lat_min <= lat <= self.lat_max and self.lon_min <= lon <= self.lon_max


@dataclass(frozen=True)
class PlaceRecord:
    """Merged reverse-geocoding result."""
    name: Optional[str] = None
    town: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postcode: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))

    @property
    def short_label(self) -> Optional[str]:
        """Return a concise label, preferring locality/state when available."""
        locality = self.name or self.town
        parts: list[str] = []
        if locality and self.state:
            parts = [locality, self.state]
        elif locality and self.country:
            parts = [locality, self.country]
        elif self.state and self.country:
            parts = [self.state, self.country]
        elif locality:
            parts = [locality]
        elif self.country:
            parts = [self.country]
        else:
            return None
        return ", ".join(parts)

    @property
    def display_label(self) -> Optional[str]:
        """Combined string, e.g. "Narsingi, Telangana, India (500075)"."""
        parts = [p for p in (self.name or self.town, self.state, self.country) if p]
        label = ", ".join(parts)
        if self.postcode:
            label = f"{label} ({self.postcode})" if label else self.postcode
        return label or None


@dataclass(frozen=True)
class GeoResult:
    """Top match of a free-text place search."""
    lat: float
    lon: float
    name: str
    state: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class IpLocation:
    """Approximate location derived from the caller's public IP address."""
    lat: float
    lon: float
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    postal: Optional[str] = None

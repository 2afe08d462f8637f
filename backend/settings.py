import os

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    return float(val)


def _as_int(val: str | None, default: int) -> int:
    if val is None or not val.strip():
        return default
    return int(val)


def _as_int_list(val: str | None, default: tuple[int, ...]) -> tuple[int, ...]:
    if val is None or not val.strip():
        return default
    values = tuple(int(part) for part in val.split(",") if part.strip())
    if not values or any(v <= 0 for v in values):
        raise ValueError(f"expected a comma separated list of positive integers, got {val!r}")
    return values


class Settings:
    def __init__(self) -> None:
        self.GEOCODER_USER_AGENT: str = os.getenv("GEOCODER_USER_AGENT", "sky-watch-pro/1.0")
        self.GEOCODER_HTTP_TIMEOUT: float = _as_float(os.getenv("GEOCODER_HTTP_TIMEOUT"), 10.0)
        self.GEOCODER_DEBUG: bool = _as_bool(os.getenv("GEOCODER_DEBUG"), False)
        self.OVERPASS_RADII_M: tuple[int, ...] = _as_int_list(
            os.getenv("OVERPASS_RADII_M"), (600, 1200, 2000, 3000, 5000)
        )
        self.OVERPASS_QUERY_TIMEOUT: int = _as_int(os.getenv("OVERPASS_QUERY_TIMEOUT"), 25)
        self.POSTCODE_DIGITS: int = _as_int(os.getenv("POSTCODE_DIGITS"), 6)
        self.KNOWN_POSTCODE_AREAS_PATH: str | None = os.getenv("KNOWN_POSTCODE_AREAS_PATH") or None


settings = Settings()

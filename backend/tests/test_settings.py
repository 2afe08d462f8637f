import pytest

from settings import Settings


def test_defaults(monkeypatch):
    for name in (
        "GEOCODER_USER_AGENT",
        "GEOCODER_HTTP_TIMEOUT",
        "GEOCODER_DEBUG",
        "OVERPASS_RADII_M",
        "OVERPASS_QUERY_TIMEOUT",
        "POSTCODE_DIGITS",
        "KNOWN_POSTCODE_AREAS_PATH",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings()

    assert s.GEOCODER_USER_AGENT == "sky-watch-pro/1.0"
    assert s.GEOCODER_HTTP_TIMEOUT == 10.0
    assert s.GEOCODER_DEBUG is False
    assert s.OVERPASS_RADII_M == (600, 1200, 2000, 3000, 5000)
    assert s.OVERPASS_QUERY_TIMEOUT == 25
    assert s.POSTCODE_DIGITS == 6
    assert s.KNOWN_POSTCODE_AREAS_PATH is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GEOCODER_USER_AGENT", "my-app/3.1 (ops@example.com)")
    monkeypatch.setenv("GEOCODER_HTTP_TIMEOUT", "2.5")
    monkeypatch.setenv("GEOCODER_DEBUG", "yes")
    monkeypatch.setenv("OVERPASS_RADII_M", "300, 900,2700")
    monkeypatch.setenv("POSTCODE_DIGITS", "5")
    monkeypatch.setenv("KNOWN_POSTCODE_AREAS_PATH", "/etc/skywatch/areas.json")

    s = Settings()

    assert s.GEOCODER_USER_AGENT == "my-app/3.1 (ops@example.com)"
    assert s.GEOCODER_HTTP_TIMEOUT == 2.5
    assert s.GEOCODER_DEBUG is True
    assert s.OVERPASS_RADII_M == (300, 900, 2700)
    assert s.POSTCODE_DIGITS == 5
    assert s.KNOWN_POSTCODE_AREAS_PATH == "/etc/skywatch/areas.json"


def test_bad_radius_list_is_rejected(monkeypatch):
    monkeypatch.setenv("OVERPASS_RADII_M", "600,-1")
    with pytest.raises(ValueError):
        Settings()

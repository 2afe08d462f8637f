import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


class DummyResponse:
    def __init__(self, json_data=None, status_code=200, bad_json=False):
        self._json = json_data
        self.status_code = status_code
        self._bad_json = bad_json

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._json


@pytest.fixture
def make_response():
    return DummyResponse


@pytest.fixture
def fake_session(monkeypatch):
    """Replace the shared HTTP session with a MagicMock for the test."""
    from services import geocoding as geo

    session = MagicMock()
    monkeypatch.setattr(geo, "get_session", lambda: session)
    return session


@pytest.fixture(autouse=True)
def reset_default_aggregator(monkeypatch):
    from services import reverse_geocoder

    monkeypatch.setattr(reverse_geocoder, "_default_aggregator", None)

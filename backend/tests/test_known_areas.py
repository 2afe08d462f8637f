"""
Tests for the known postcode area table.
"""
import json

import pytest

from domain.models import KnownPostcodeArea
from services.known_areas import (
    DEFAULT_KNOWN_AREAS,
    KnownAreaOverride,
    build_known_area_override,
    load_known_areas,
)


class TestKnownAreaOverride:
    def test_default_table_covers_sample_point(self):
        override = KnownAreaOverride()
        assert override.lookup(17.35, 78.34) == "500075"

    def test_point_outside_every_box(self):
        override = KnownAreaOverride()
        assert override.lookup(28.61, 77.21) is None

    def test_bounds_are_inclusive(self):
        area = KnownPostcodeArea(lat_min=1.0, lat_max=2.0, lon_min=3.0, lon_max=4.0, postcode="111111")
        override = KnownAreaOverride([area])
        assert override.lookup(1.0, 3.0) == "111111"
        assert override.lookup(2.0, 4.0) == "111111"
        assert override.lookup(2.0001, 4.0) is None

    def test_first_match_wins_on_overlap(self):
        first = KnownPostcodeArea(lat_min=0.0, lat_max=10.0, lon_min=0.0, lon_max=10.0, postcode="111111")
        second = KnownPostcodeArea(lat_min=4.0, lat_max=6.0, lon_min=4.0, lon_max=6.0, postcode="222222")
        assert KnownAreaOverride([first, second]).lookup(5.0, 5.0) == "111111"
        assert KnownAreaOverride([second, first]).lookup(5.0, 5.0) == "222222"

    def test_empty_table_never_matches(self):
        assert KnownAreaOverride([]).lookup(17.35, 78.34) is None


class TestLoadKnownAreas:
    def test_load_from_json_file(self, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text(
            json.dumps(
                [{"lat_min": 12.9, "lat_max": 13.0, "lon_min": 77.5, "lon_max": 77.6, "postcode": " 560001 "}]
            )
        )
        areas = load_known_areas(str(path))
        assert areas == [KnownPostcodeArea(12.9, 13.0, 77.5, 77.6, "560001")]

    def test_missing_key_is_rejected(self, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text(json.dumps([{"lat_min": 1, "lat_max": 2, "lon_min": 3, "postcode": "1"}]))
        with pytest.raises(ValueError, match="lon_max"):
            load_known_areas(str(path))

    def test_inverted_bounds_are_rejected(self, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text(json.dumps([{"lat_min": 2, "lat_max": 1, "lon_min": 3, "lon_max": 4, "postcode": "1"}]))
        with pytest.raises(ValueError, match="inverted"):
            load_known_areas(str(path))

    @pytest.mark.parametrize("postcode", [None, True, 500075.0, ["500075"]])
    def test_non_scalar_postcode_is_rejected(self, tmp_path, postcode):
        path = tmp_path / "areas.json"
        path.write_text(json.dumps([{"lat_min": 1, "lat_max": 2, "lon_min": 3, "lon_max": 4, "postcode": postcode}]))
        with pytest.raises(ValueError, match="invalid postcode"):
            load_known_areas(str(path))

    def test_integer_postcode_is_accepted(self, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text(json.dumps([{"lat_min": 1, "lat_max": 2, "lon_min": 3, "lon_max": 4, "postcode": 500075}]))
        assert load_known_areas(str(path))[0].postcode == "500075"

    def test_non_list_document_is_rejected(self, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text(json.dumps({"postcode": "500075"}))
        with pytest.raises(ValueError):
            load_known_areas(str(path))

    def test_build_without_path_uses_defaults(self):
        override = build_known_area_override(None)
        assert override.areas == DEFAULT_KNOWN_AREAS

    def test_build_with_path_replaces_defaults(self, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text(json.dumps([]))
        override = build_known_area_override(str(path))
        assert override.lookup(17.35, 78.34) is None

from domain.models import KnownPostcodeArea, PlaceRecord, ProviderPlaceFragment


def test_fragment_emptiness():
    assert ProviderPlaceFragment.empty().is_empty
    assert not ProviderPlaceFragment(postcode="500075").is_empty


def test_place_short_label_prefers_locality_and_state():
    place = PlaceRecord(name="Narsingi", state="Telangana", country="India")
    assert place.short_label == "Narsingi, Telangana"


def test_place_short_label_without_locality():
    assert PlaceRecord(state="Telangana", country="India").short_label == "Telangana, India"
    assert PlaceRecord(postcode="500075").short_label is None


def test_place_display_label_includes_postcode():
    place = PlaceRecord(town="Hyderabad", state="Telangana", country="India", postcode="500075")
    assert place.display_label == "Hyderabad, Telangana, India (500075)"
    assert PlaceRecord(postcode="500075").display_label == "500075"
    assert PlaceRecord().display_label is None


def test_known_area_contains():
    area = KnownPostcodeArea(lat_min=17.33, lat_max=17.37, lon_min=78.32, lon_max=78.36, postcode="500075")
    assert area.contains(17.35, 78.34)
    assert not area.contains(17.40, 78.34)

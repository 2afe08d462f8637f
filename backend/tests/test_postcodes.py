import pytest

from services.postcodes import PostcodeFormat, normalize_postcode


def test_extracts_six_digit_run_from_noisy_string():
    assert normalize_postcode("500 075, Telangana") == "500075"


def test_short_numeric_code_is_returned_unchanged():
    assert normalize_postcode("12345") == "12345"


def test_blank_inputs_are_absent():
    assert normalize_postcode("") is None
    assert normalize_postcode("   ") is None
    assert normalize_postcode(None) is None


def test_non_numeric_code_is_trimmed():
    assert normalize_postcode("  SW1A 1AA ") == "SW1A 1AA"


def test_longer_digit_run_keeps_first_six():
    assert normalize_postcode("PIN 5000751") == "500075"


def test_integer_like_values_are_accepted():
    assert normalize_postcode(500075) == "500075"  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "raw",
    ["500 075, Telangana", "12345", "", "  SW1A 1AA ", "560-001", "abc", "1 2 3 4 5 6 7", None],
)
def test_normalize_is_idempotent(raw):
    once = normalize_postcode(raw)
    assert normalize_postcode(once) == once


def test_custom_format_length():
    us = PostcodeFormat(5)
    assert normalize_postcode("Chicago, IL 60614-1234", us) == "60614"
    assert us.matches("60614")
    assert not us.matches("500075")


def test_format_matches_only_exact_digit_strings():
    fmt = PostcodeFormat()
    assert fmt.matches("500075")
    assert not fmt.matches("50007")
    assert not fmt.matches("50007A")
    assert not fmt.matches(None)


def test_format_rejects_non_positive_length():
    with pytest.raises(ValueError):
        PostcodeFormat(0)


@pytest.mark.parametrize("raw", ["50007²", "٥٠٠٠٧٥", "５０００７５"])
def test_only_ascii_digits_count(raw):
    fmt = PostcodeFormat()
    assert not fmt.matches(raw)
    assert normalize_postcode(raw) == raw

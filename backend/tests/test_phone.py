import pytest

from hotelcore.services.phone import format_for_messaging, normalize_phone, phones_match


@pytest.mark.parametrize("raw, expected", [
    ("(555) 123-4567", "+15551234567"),
    ("555.123.4567", "+15551234567"),
    ("1 555 123 4567", "+15551234567"),
    ("+44 20 7946 0958", "+442079460958"),
    ("442079460958", "+442079460958"),
    ("12345", "+12345"),
])
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


def test_formatting_differences_still_match():
    assert phones_match("555-123-4567", "+1 (555) 123-4567")


def test_country_code_difference_matches_on_last_ten_digits():
    # Same national number under a different country code
    assert phones_match("+44 555 123 4567", "+1 555 123 4567")


def test_different_numbers_do_not_match():
    assert not phones_match("+15551234567", "+15551234568")


def test_short_numbers_need_exact_match():
    assert phones_match("12345", "12345")
    assert not phones_match("12345", "+9912345")


def test_missing_phone_never_matches():
    assert not phones_match(None, "+15551234567")
    assert not phones_match("+15551234567", "")


def test_format_for_messaging():
    assert format_for_messaging("(555) 123-4567") == "+15551234567"
    assert format_for_messaging("+1 555 123 4567") == "+15551234567"
    assert format_for_messaging("abc") is None
    assert format_for_messaging(None) is None

"""
Tests for Romanian format validators and the geo reference data.
"""

from __future__ import annotations

from vetfinder.domain.geo import (
    BUCHAREST_SECTORS,
    ROMANIAN_COUNTIES,
    find_county,
    get_county_name,
    get_sector_name,
    localities_for,
)
from vetfinder.domain.romanian import (
    format_romanian_phone,
    format_romanian_postal_code,
    normalize_cui,
    normalize_romanian_phone,
    validate_cui,
    validate_romanian_phone,
    validate_romanian_postal_code,
)


def test_phone_formats():
    """Local 07 and international +40 numbers are accepted, spaces and dashes ignored."""
    assert validate_romanian_phone("0712345678") is True
    assert validate_romanian_phone("+40712345678") is True
    assert validate_romanian_phone("0712 345 678") is True
    assert validate_romanian_phone("0712-345-678") is True
    assert validate_romanian_phone("12345") is False
    assert validate_romanian_phone("0812345678") is False
    assert validate_romanian_phone("") is False
    assert validate_romanian_phone(None) is False


def test_postal_code():
    assert validate_romanian_postal_code("010101") is True
    assert validate_romanian_postal_code("400 114") is True
    assert validate_romanian_postal_code("12345") is False
    assert validate_romanian_postal_code("1234567") is False


def test_cui():
    assert validate_cui("12345678") is True
    assert validate_cui("RO12345678") is True
    assert validate_cui("ro 1234") is True
    assert validate_cui("1") is False
    assert validate_cui("RO12345678901") is False
    assert validate_cui("ABC") is False


def test_formatting_and_normalisation():
    assert format_romanian_phone("0712345678") == "0712 345 678"
    assert format_romanian_phone("+40712345678") == "+40 712 345 678"
    assert format_romanian_postal_code("010101") == "010 101"
    assert normalize_romanian_phone("0712 345 678") == "+40712345678"
    assert normalize_romanian_phone("+40712345678") == "+40712345678"
    assert normalize_cui("12345678") == "RO12345678"
    assert normalize_cui("ro12345678") == "RO12345678"


def test_counties_and_sectors():
    assert len(ROMANIAN_COUNTIES) == 42
    assert get_county_name("CJ") == "Cluj"
    assert get_county_name("XX") is None
    assert len(BUCHAREST_SECTORS) == 6
    assert get_sector_name("S3") == "Sector 3"


def test_find_county_by_code_or_name():
    """Lookup ignores case and diacritics."""
    assert find_county("CJ").name == "Cluj"
    assert find_county("cluj").code == "CJ"
    assert find_county("Bucuresti").code == "B"
    assert find_county("Iași").code == "IS"
    assert find_county("Atlantis") is None
    assert find_county("") is None


def test_localities():
    assert "Cluj-Napoca" in localities_for("CJ")
    assert localities_for("Cluj") == localities_for("CJ")
    assert localities_for("unknown") == []

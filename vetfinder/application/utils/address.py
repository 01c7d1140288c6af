from __future__ import annotations


def _clean(value: str | None) -> str:
    return (value or "").strip()


def build_address_for_geocoding(
    street: str | None = None,
    street_number: str | None = None,
    building: str | None = None,
    apartment: str | None = None,
    city: str | None = None,
    county: str | None = None,
    postal_code: str | None = None,
    country: str | None = "Romania",
) -> str:
    """
    Join the Romanian address fields into one free-text query.

    "Strada Lalelelor 12, Bloc A3, Ap. 7, Cluj-Napoca, Cluj, 400001, Romania"
    """
    parts: list[str] = []

    street_line = " ".join(p for p in (_clean(street), _clean(street_number)) if p)
    if street_line:
        parts.append(street_line)
    if _clean(building):
        parts.append(f"Bloc {_clean(building)}")
    if _clean(apartment):
        parts.append(f"Ap. {_clean(apartment)}")
    for value in (city, county, postal_code):
        if _clean(value):
            parts.append(_clean(value))

    country_name = _clean("Romania" if country is None else country)
    if country_name:
        parts.append(country_name)

    return ", ".join(parts)

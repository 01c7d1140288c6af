"""
Romanian-specific formats: phone numbers, postal codes and CUI (tax id).
"""

from __future__ import annotations

import re

_INTL_PHONE = re.compile(r"^\+40[0-9]{9}$")
_LOCAL_PHONE = re.compile(r"^07[0-9]{8}$")
_POSTAL_CODE = re.compile(r"^[0-9]{6}$")
_CUI = re.compile(r"^(RO)?[0-9]{2,10}$")


def _strip_phone(phone: str) -> str:
    return re.sub(r"[\s-]", "", phone)


def validate_romanian_phone(phone: str | None) -> bool:
    """+40 XXX XXX XXX or 07XX XXX XXX; spaces and dashes are ignored."""
    if not phone or not isinstance(phone, str):
        return False
    clean = _strip_phone(phone)
    return bool(_INTL_PHONE.match(clean) or _LOCAL_PHONE.match(clean))


def validate_romanian_postal_code(postal_code: str | None) -> bool:
    if not postal_code or not isinstance(postal_code, str):
        return False
    return bool(_POSTAL_CODE.match(re.sub(r"\s", "", postal_code)))


def validate_cui(cui: str | None) -> bool:
    # Format check only, no checksum.
    if not cui or not isinstance(cui, str):
        return False
    return bool(_CUI.match(re.sub(r"\s", "", cui).upper()))


def format_romanian_phone(phone: str | None) -> str:
    if not phone:
        return ""
    clean = re.sub(r"[^\d+]", "", phone)
    if clean.startswith("+40"):
        digits = clean[3:]
        if len(digits) >= 9:
            return f"+40 {digits[0:3]} {digits[3:6]} {digits[6:9]}"
        return f"+40 {digits}"
    if clean.startswith("07"):
        if len(clean) >= 10:
            return f"{clean[0:4]} {clean[4:7]} {clean[7:10]}"
        return clean
    return phone


def format_romanian_postal_code(code: str | None) -> str:
    if not code:
        return ""
    clean = re.sub(r"\D", "", code)
    if len(clean) == 6:
        return f"{clean[:3]} {clean[3:]}"
    return clean


def normalize_romanian_phone(phone: str | None) -> str:
    """Storage form: local 07... numbers become +407..."""
    if not phone:
        return ""
    clean = _strip_phone(phone)
    if clean.startswith("07") and len(clean) == 10:
        return f"+40{clean[1:]}"
    if clean.startswith("+40"):
        return clean
    return phone


def normalize_cui(cui: str | None) -> str:
    if not cui:
        return ""
    clean = re.sub(r"\s", "", cui).upper()
    if not clean.startswith("RO") and clean[:1].isdigit():
        return f"RO{clean}"
    return clean

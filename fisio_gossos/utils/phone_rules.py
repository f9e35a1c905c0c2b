"""
Per-country phone rules and the phone validator built on them.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PhoneRule:
    """Validation record for one country."""

    code: str
    name: str
    dial_code: str
    lengths: tuple[int, ...]
    pattern: re.Pattern[str]
    description: str


@dataclass(frozen=True)
class PhoneValidation:
    valid: bool
    message: str


PHONE_RULES: dict[str, PhoneRule] = {
    rule.code: rule
    for rule in (
        PhoneRule("ES", "España", "+34", (9,), re.compile(r"^[67]\d{8}$", re.ASCII),
                  "9 dígitos, empezando por 6 o 7"),
        PhoneRule("FR", "Francia", "+33", (9,), re.compile(r"^[1-9]\d{8}$", re.ASCII),
                  "9 dígitos"),
        PhoneRule("IT", "Italia", "+39", (9, 10), re.compile(r"^3\d{8,9}$", re.ASCII),
                  "9-10 dígitos, empezando por 3"),
        PhoneRule("PT", "Portugal", "+351", (9,), re.compile(r"^9[1236]\d{7}$", re.ASCII),
                  "9 dígitos, empezando por 91, 92, 93 o 96"),
        PhoneRule("DE", "Alemania", "+49", (10, 11), re.compile(r"^1[5-7]\d{8,9}$", re.ASCII),
                  "10-11 dígitos, empezando por 15, 16 o 17"),
        PhoneRule("GB", "Reino Unido", "+44", (10,), re.compile(r"^7\d{9}$", re.ASCII),
                  "10 dígitos, empezando por 7"),
        PhoneRule("US", "Estados Unidos", "+1", (10,), re.compile(r"^\d{10}$", re.ASCII),
                  "10 dígitos"),
    )
}

DEFAULT_COUNTRY = "ES"

_SEPARATORS = re.compile(r"[\s-]")


def get_country_by_code(code: Optional[str]) -> PhoneRule:
    """Look up a country rule; unknown codes fall back to Spain."""
    return PHONE_RULES.get((code or "").upper(), PHONE_RULES[DEFAULT_COUNTRY])


def clean_phone(phone: str) -> str:
    """Strip spaces and hyphens."""
    return _SEPARATORS.sub("", phone)


def validate_phone_number(phone: Optional[str], country_code: Optional[str]) -> PhoneValidation:
    """
    Validate a local phone number against its country rule.

    Length is checked before the leading-digit pattern, so a short number
    reports the length problem.
    """
    rule = PHONE_RULES.get((country_code or "").upper())
    if rule is None:
        return PhoneValidation(valid=False, message="País no soportado")

    if not phone or not phone.strip():
        return PhoneValidation(valid=False, message="El teléfono es obligatorio")

    cleaned = clean_phone(phone)

    if len(cleaned) not in rule.lengths:
        expected = " o ".join(str(length) for length in rule.lengths)
        return PhoneValidation(valid=False, message=f"El teléfono debe tener {expected} dígitos")

    if not rule.pattern.match(cleaned):
        return PhoneValidation(valid=False, message=f"Formato incorrecto: {rule.description}")

    return PhoneValidation(valid=True, message="Válido")

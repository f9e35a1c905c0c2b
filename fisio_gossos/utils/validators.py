"""
Form validation rules shared by registration and profile updates.

Every function is pure: no I/O, no state. Results carry all violations
found; forms display the first one.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

PROHIBITED_EMAIL_CHARS: tuple[str, ...] = (
    " ", "\t", "\n", "\r", "<", ">", "(", ")", "[", "]", ",", ":", ";",
    '"', "'", "\\", "/", "?", "=", "&", "#", "!", "$", "%", "^", "*",
    "|", "`", "~", "{", "}",
)

PASSWORD_MIN_LENGTH = 8
PASSWORD_SYMBOLS = '!@#$%^&*(),.?":{}|<>'


@dataclass
class ValidationResult:
    """Outcome of a field validation."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)

    @property
    def first_error(self) -> str:
        return self.errors[0] if self.errors else ""


@dataclass(frozen=True)
class PasswordRequirements:
    """Independent password checks, reported one by one for live feedback."""

    length: bool
    lowercase: bool
    uppercase: bool
    number: bool
    symbol: bool

    def all_met(self) -> bool:
        return all((self.length, self.lowercase, self.uppercase, self.number, self.symbol))


@dataclass(frozen=True)
class PasswordValidation:
    requirements: PasswordRequirements
    is_valid: bool


def validate_email(email: str | None) -> ValidationResult:
    """
    Validate email syntax.

    Checks run in a fixed order (prohibited characters, spaces, ``@`` count,
    consecutive dots) and the final regex only runs when nothing else failed.
    """
    if not email or not email.strip():
        return ValidationResult(is_valid=False, errors=["El email es obligatorio"])

    errors: list[str] = []

    prohibited_found = [char for char in PROHIBITED_EMAIL_CHARS if char in email]
    if prohibited_found:
        errors.append(f"Caracteres no permitidos: {', '.join(prohibited_found)}")

    if " " in email:
        errors.append("Los emails no pueden contener espacios")

    at_count = email.count("@")
    if at_count == 0:
        errors.append("El email debe contener @")
    elif at_count > 1:
        errors.append("El email solo puede contener una @")

    if ".." in email:
        errors.append("No se permiten puntos consecutivos")

    if not errors and not EMAIL_REGEX.match(email):
        errors.append("Formato de email inválido")

    return ValidationResult(is_valid=not errors, errors=errors)


def check_password_requirements(password: str) -> PasswordRequirements:
    return PasswordRequirements(
        length=len(password) >= PASSWORD_MIN_LENGTH,
        lowercase=re.search(r"[a-z]", password) is not None,
        uppercase=re.search(r"[A-Z]", password) is not None,
        number=re.search(r"[0-9]", password) is not None,
        symbol=any(char in PASSWORD_SYMBOLS for char in password),
    )


def validate_password(password: str | None) -> PasswordValidation:
    """Password strength: valid iff all five requirements are met."""
    requirements = check_password_requirements(password or "")
    return PasswordValidation(requirements=requirements, is_valid=requirements.all_met())

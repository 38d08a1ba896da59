"""Identity canonicalization.

Normalizes raw claim input (name, email, phone) into the canonical tuple
that UID derivation hashes. Pure functions, no I/O.
"""

import re
from dataclasses import dataclass

from goldpass.config import DEFAULT_COUNTRY_CODE
from goldpass.exceptions import ValidationError

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# + followed by 8-15 digits, no leading zero in the country code
E164_PATTERN = re.compile(r"^\+[1-9][0-9]{7,14}$")
NATIONAL_DIGITS = re.compile(r"[0-9]+")

# Formatting characters people type into phone fields
PHONE_SEPARATORS = re.compile(r"[\s\-.()]")


@dataclass(frozen=True)
class CanonicalIdentity:
    """Normalized identity used as the sole input to UID derivation."""

    name: str
    email: str
    phone_e164: str


def normalize_name(name: str | None) -> str:
    """Trim and collapse internal whitespace."""
    return re.sub(r"\s+", " ", (name or "").strip())


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def validate_name(name: str) -> list[str]:
    """Return reasons the normalized name is unacceptable (empty if fine)."""
    if not name:
        return ["Name is required"]
    if len(name) < NAME_MIN_LENGTH:
        return [f"Name must be at least {NAME_MIN_LENGTH} characters"]
    if len(name) > NAME_MAX_LENGTH:
        return [f"Name must be at most {NAME_MAX_LENGTH} characters"]
    return []


def validate_email(email: str) -> list[str]:
    if not email:
        return ["Email is required"]
    if not EMAIL_PATTERN.match(email):
        return ["Invalid email format"]
    return []


def normalize_phone(phone: str | None, default_country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Normalize a phone number to E.164.

    Accepts international input (+CC...) and national numbers for the
    default country: 10 digits, or 11 digits already carrying the country
    code.

    Raises:
        ValidationError: If the number cannot be expressed as E.164.
    """
    raw = (phone or "").strip()
    if not raw:
        raise ValidationError(["Phone number is required"])

    compact = PHONE_SEPARATORS.sub("", raw)

    if compact.startswith("+"):
        candidate = compact
    elif not NATIONAL_DIGITS.fullmatch(compact):
        raise ValidationError([f"Phone number contains invalid characters: {raw}"])
    elif len(compact) == 10:
        candidate = f"+{default_country_code}{compact}"
    elif len(compact) == 10 + len(default_country_code) and compact.startswith(default_country_code):
        candidate = f"+{compact}"
    else:
        raise ValidationError(
            [f"Phone number must include a country code (+CC) or be a 10-digit national number: {raw}"]
        )

    if not E164_PATTERN.match(candidate):
        raise ValidationError([f"Phone number is not valid E.164 (+ and 8-15 digits): {raw}"])

    return candidate


def canonicalize(
    name: str | None,
    email: str | None,
    phone: str | None,
    default_country_code: str = DEFAULT_COUNTRY_CODE,
) -> CanonicalIdentity:
    """Build the canonical identity for a claim.

    All three fields are checked independently so the caller gets every
    problem at once.

    Raises:
        ValidationError: With one reason per failing field.
    """
    canonical_name = normalize_name(name)
    canonical_email = normalize_email(email)

    errors = validate_name(canonical_name) + validate_email(canonical_email)

    phone_e164 = ""
    try:
        phone_e164 = normalize_phone(phone, default_country_code)
    except ValidationError as e:
        errors.extend(e.errors)

    if errors:
        raise ValidationError(errors)

    return CanonicalIdentity(name=canonical_name, email=canonical_email, phone_e164=phone_e164)

"""Profile-completion field validation.

Every field is optional; fields that are present are normalized and
checked, and all failures are reported together.
"""

import re
from datetime import datetime

from goldpass.exceptions import ValidationError

US_STATES = frozenset({
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL",
    "GA", "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME",
    "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH",
    "NJ", "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI",
    "SC", "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
})

ZIP_PATTERN = re.compile(r"^[0-9]{5}(-[0-9]{4})?$")
AGE_PATTERN = re.compile(r"[0-9]+")
GENDERS = ("male", "female")

CITY_MIN_LENGTH = 2
CITY_MAX_LENGTH = 50
STREET_MAX_LENGTH = 100
MIN_AGE = 13  # COPPA
MAX_AGE = 120


def _present(value) -> bool:
    return value is not None and not (isinstance(value, str) and not value.strip())


def _parse_age(value: int | str) -> int | None:
    """Whole-number age from a JSON number or a numeric string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and AGE_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    return None


def validate_profile(
    city: str | None = None,
    state: str | None = None,
    zip_code: str | None = None,
    gender: str | None = None,
    age: int | str | None = None,
    street1: str | None = None,
) -> dict:
    """Validate and normalize submitted profile fields.

    Returns:
        Member column updates (profile_* keys) for the fields provided.

    Raises:
        ValidationError: With one reason per failing field.
    """
    errors: list[str] = []
    changes: dict = {}

    if _present(city):
        city = city.strip()
        if len(city) < CITY_MIN_LENGTH:
            errors.append("City name too short")
        elif len(city) > CITY_MAX_LENGTH:
            errors.append("City name too long")
        else:
            changes["profile_city"] = city

    if _present(state):
        state = state.strip().upper()
        if state not in US_STATES:
            errors.append("Invalid US state code")
        else:
            changes["profile_state"] = state

    if _present(zip_code):
        zip_code = zip_code.strip()
        if not ZIP_PATTERN.match(zip_code):
            errors.append("Invalid ZIP code format (use NNNNN or NNNNN-NNNN)")
        else:
            changes["profile_zip"] = zip_code

    if _present(gender):
        gender = gender.strip().lower()
        if gender not in GENDERS:
            errors.append("Gender must be male or female")
        else:
            changes["profile_gender"] = gender

    if _present(age):
        age = _parse_age(age)
        if age is None:
            errors.append("Age must be a whole number")
        elif age < MIN_AGE:
            errors.append(f"Must be {MIN_AGE} or older")
        elif age > MAX_AGE:
            errors.append("Invalid age")
        else:
            changes["profile_age"] = age

    if _present(street1):
        street1 = street1.strip()
        if len(street1) > STREET_MAX_LENGTH:
            errors.append(f"Street address must be at most {STREET_MAX_LENGTH} characters")
        else:
            changes["profile_street1"] = street1

    if errors:
        raise ValidationError(errors)

    if changes:
        changes["profile_last_updated_at"] = datetime.utcnow()
    return changes

"""Identity canonicalization, UID derivation and profile validation."""

from goldpass.identity.canonical import CanonicalIdentity, canonicalize, normalize_phone
from goldpass.identity.profile import US_STATES, validate_profile
from goldpass.identity.uid import UID_PREFIX, UidDeriver

__all__ = [
    "CanonicalIdentity",
    "canonicalize",
    "normalize_phone",
    "UID_PREFIX",
    "UidDeriver",
    "US_STATES",
    "validate_profile",
]

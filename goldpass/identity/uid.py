"""Deterministic member UID derivation.

The same canonical identity always maps to the same UID, so a repeated
claim lands on the existing member instead of creating a duplicate. The
UID is a keyed one-way hash of the identity and does not reveal PII.
"""

import base64
import hashlib
import hmac

from goldpass.identity.canonical import CanonicalIdentity

UID_PREFIX = "hu_"
UID_DIGEST_BYTES = 10  # 80 bits -> 16 base32 chars
UID_LENGTH = len(UID_PREFIX) + 16
FIELD_SEPARATOR = "|"


class UidDeriver:
    """Derives member UIDs with HMAC-SHA256 keyed by a deployment secret."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("UID secret must not be empty")
        self._key = secret.encode("utf-8")

    @staticmethod
    def hash_input(identity: CanonicalIdentity) -> str:
        """Stable field ordering fed to the hash (email|phone|name)."""
        return FIELD_SEPARATOR.join(
            (identity.email, identity.phone_e164, identity.name.lower())
        )

    def derive(self, identity: CanonicalIdentity) -> str:
        digest = hmac.new(
            self._key,
            self.hash_input(identity).encode("utf-8"),
            hashlib.sha256,
        ).digest()
        encoded = base64.b32encode(digest[:UID_DIGEST_BYTES]).decode("ascii")
        return f"{UID_PREFIX}{encoded.lower()}"

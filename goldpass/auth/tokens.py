"""Bearer token management for anonymous member ownership.

Possession of the plaintext edit token is the only proof of ownership of
a member record. Only a hash is stored:

    stored = bcrypt(HMAC-SHA256(token_secret, strip_separators(token)))

Hashing the separator-stripped form means a token whose hyphens were
mangled in transit (Apple Wallet back fields, data detectors) still
verifies. Records created before keyed hashing hold a bare SHA-256 hex
digest of the raw token; those are checked on the legacy path.
"""

import hashlib
import hmac
import logging
import re
import secrets

import bcrypt

log = logging.getLogger(__name__)

# Default bcrypt cost factor (2^12 = 4096 iterations)
BCRYPT_COST_FACTOR = 12

TOKEN_BYTES = 16  # 128 bits -> 32 hex chars
BINDING_LENGTH = 8
TOKEN_SEPARATORS = re.compile(r"[-\s]")
LEGACY_HASH_PATTERN = re.compile(r"^[0-9a-f]{64}$")


def strip_separators(token: str) -> str:
    """Compatibility form of a token: hyphens and whitespace removed."""
    return TOKEN_SEPARATORS.sub("", token)


class TokenManager:
    """Generates, hashes and verifies owner/edit tokens."""

    def __init__(self, secret: str, rounds: int = BCRYPT_COST_FACTOR):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._key = secret.encode("utf-8")
        self._rounds = rounds

    def generate_owner_token(self, uid: str, device_id: str | None = None) -> str:
        """Generate an owner token bound to a uid/device for auditability.

        Format: "{binding}-{random}". The binding is a short keyed hash of
        uid and device id so a token seen in logs can be attributed to the
        device that requested it. Verification never re-derives it.
        """
        context = f"{uid}|{device_id or ''}".encode("utf-8")
        binding = hmac.new(self._key, context, hashlib.sha256).hexdigest()[:BINDING_LENGTH]
        return f"{binding}-{secrets.token_hex(TOKEN_BYTES)}"

    def generate_edit_token(self) -> str:
        return secrets.token_hex(TOKEN_BYTES)

    def _peppered(self, value: str) -> bytes:
        digest = hmac.new(self._key, value.encode("utf-8"), hashlib.sha256)
        return digest.hexdigest().encode("ascii")

    def hash_token(self, token: str) -> str:
        """One-way salted hash suitable for storage. Never store plaintext."""
        hashed = bcrypt.hashpw(
            self._peppered(strip_separators(token)),
            bcrypt.gensalt(rounds=self._rounds),
        )
        return hashed.decode("ascii")

    def verify_token(self, presented: str | None, stored_hash: str | None) -> bool:
        """Check a presented token against a stored hash.

        Both the token as presented and its separator-stripped form are
        tried. Any failure is False, never an exception.
        """
        if not presented or not stored_hash:
            return False

        candidates = [presented]
        stripped = strip_separators(presented)
        if stripped and stripped != presented:
            candidates.append(stripped)

        if LEGACY_HASH_PATTERN.match(stored_hash):
            return self._verify_legacy(candidates, stored_hash)

        stored = stored_hash.encode("ascii", errors="ignore")
        matched = False
        for candidate in candidates:
            try:
                # No short-circuit: both candidates are always checked
                matched = bcrypt.checkpw(self._peppered(candidate), stored) or matched
            except ValueError:
                log.warning("Stored token hash is malformed")
                return False
        return matched

    @staticmethod
    def _verify_legacy(candidates: list[str], stored_hash: str) -> bool:
        matched = False
        for candidate in candidates:
            digest = hashlib.sha256(candidate.encode("utf-8")).hexdigest()
            matched = hmac.compare_digest(digest, stored_hash) or matched
        return matched

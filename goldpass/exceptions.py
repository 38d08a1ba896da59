"""Gold Pass exceptions.

Each exception carries an HTTP status and a client-safe message. Internal
detail stays in the log; handlers in goldpass.main only ever return
`message` (and `errors` for validation failures).
"""


class GoldPassError(Exception):
    """Base exception for Gold Pass service errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(GoldPassError):
    """Malformed input. Carries every failing reason, not just the first."""

    status_code = 400

    def __init__(self, errors: list[str], message: str = "Validation failed"):
        self.errors = list(errors)
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message}: {'; '.join(self.errors)}"


class NotFoundError(GoldPassError):
    """No such UID or short id."""

    status_code = 404

    @classmethod
    def member(cls, uid: str) -> "NotFoundError":
        return cls(f"Member not found: {uid}")

    @classmethod
    def short_link(cls, short_id: str) -> "NotFoundError":
        return cls(f"Short link not found: {short_id}")


class AuthorizationError(GoldPassError):
    """Token mismatch or unknown member on a token-protected operation.

    The message is identical in both cases so callers cannot tell which
    UIDs exist.
    """

    status_code = 403

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class PassInactiveError(GoldPassError):
    """Pass issuance requested for a member whose pass is not active."""

    status_code = 403

    def __init__(self, message: str = "Pass is not active"):
        super().__init__(message)


class RateLimitedError(GoldPassError):
    """Too many requests for this action from this client."""

    status_code = 429

    def __init__(self, retry_after: int, message: str = "Too many requests, please try again later"):
        self.retry_after = retry_after
        super().__init__(message)


class UpstreamUnavailableError(GoldPassError):
    """Store or signer failure, including timeouts."""

    status_code = 500


class StoreUnavailableError(UpstreamUnavailableError):
    """Database call failed or timed out."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)


class PassGenerationFailed(UpstreamUnavailableError):
    """The external signer could not produce a pass."""

    status_code = 503

    def __init__(self, reason: str, message: str = "Pass generation service unavailable"):
        self.reason = reason
        super().__init__(message)


class PassPayloadError(GoldPassError):
    """A pass payload would embed a URL that fails https validation."""

    status_code = 500

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"Pass payload field {field} is not a valid https URL")


class ShortLinkCollisionError(UpstreamUnavailableError):
    """Short id collided twice in a row."""

    def __init__(self, message: str = "Could not allocate a short link"):
        super().__init__(message)

"""Ownership tokens and request rate limiting."""

from goldpass.auth.rate_limit import RateLimitDecision, RateLimiter
from goldpass.auth.tokens import TokenManager, strip_separators

__all__ = [
    "RateLimitDecision",
    "RateLimiter",
    "TokenManager",
    "strip_separators",
]

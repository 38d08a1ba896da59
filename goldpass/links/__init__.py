"""Transport-safe short links."""

from goldpass.links.shortlinks import (
    ShortLinkResolver,
    ShortLinkTarget,
    generate_short_id,
)

__all__ = ["ShortLinkResolver", "ShortLinkTarget", "generate_short_id"]

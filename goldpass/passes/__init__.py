"""Wallet pass payloads, URL hygiene and signing."""

from goldpass.passes.payload import PASS_FAMILIES, PassFamily, PassPayload, PassPayloadBuilder
from goldpass.passes.signer import PKPASS_CONTENT_TYPE, PassSigner, SignedPass
from goldpass.passes.urls import is_https_url, require_https_url, sanitize_url

__all__ = [
    "PASS_FAMILIES",
    "PassFamily",
    "PassPayload",
    "PassPayloadBuilder",
    "PKPASS_CONTENT_TYPE",
    "PassSigner",
    "SignedPass",
    "is_https_url",
    "require_https_url",
    "sanitize_url",
]

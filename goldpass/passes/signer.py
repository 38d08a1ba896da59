"""Client for the external pass signing service.

The signer receives the payload JSON and returns the signed binary
(.pkpass archive). Signing certificates and the archive format live on
the signer's side; this module only bounds the call and classifies
failures.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx

from goldpass.exceptions import PassGenerationFailed
from goldpass.passes.payload import PassPayload

log = logging.getLogger(__name__)

PKPASS_CONTENT_TYPE = "application/vnd.apple.pkpass"
SERIAL_HEADER = "X-Pass-Serial"


@dataclass(frozen=True)
class SignedPass:
    data: bytes
    serial: str
    content_type: str = PKPASS_CONTENT_TYPE


class PassSigner:
    """POSTs payloads to the signer with a bounded timeout.

    Args:
        url: Signer endpoint.
        timeout: HTTP timeout in seconds.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def sign(self, payload: PassPayload) -> SignedPass:
        """Sign a payload.

        Raises:
            PassGenerationFailed: On timeout, transport error, non-2xx
                status or an empty body.
        """
        start = datetime.now(timezone.utc)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, json=payload.to_dict())
        except httpx.TimeoutException:
            log.warning(f"Timeout calling signer at {self._url}")
            raise PassGenerationFailed("timeout")
        except httpx.HTTPError as e:
            log.error(f"Signer request to {self._url} failed: {e}")
            raise PassGenerationFailed(f"transport error: {e.__class__.__name__}")

        elapsed_ms = int((datetime.now(timezone.utc) - start).total_seconds() * 1000)

        if not response.is_success:
            log.warning(f"Signer returned HTTP {response.status_code} ({elapsed_ms}ms)")
            raise PassGenerationFailed(f"HTTP {response.status_code}")

        if not response.content:
            log.warning(f"Signer returned an empty body ({elapsed_ms}ms)")
            raise PassGenerationFailed("empty response")

        serial = response.headers.get(SERIAL_HEADER) or payload.serial_number
        log.info(f"Signed pass {serial} ({len(response.content)} bytes, {elapsed_ms}ms)")
        return SignedPass(data=response.content, serial=serial)

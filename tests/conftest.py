"""Pytest fixtures for Gold Pass tests."""
import json
import os
from typing import AsyncGenerator

# Keep test runs from writing goldpass.log into the working directory
os.environ.setdefault("GOLDPASS_LOG_FILE", "")

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from goldpass.main import create_app
from goldpass.passes.signer import PassSigner
from goldpass.services import CLAIM_ACTION, PROFILE_ACTION, Services, build_services

TEST_BASE_URL = "https://gold.test"
TEST_SIGNER_URL = "https://signer.test/sign"
FAKE_PKPASS = b"PK\x03\x04fake-pkpass-archive"

# Cost factor 4 keeps bcrypt fast in tests
TEST_BCRYPT_ROUNDS = 4

TEST_RATE_LIMITS = {CLAIM_ACTION: 5, PROFILE_ACTION: 5}


class SignerStub:
    """Stands in for the signing service behind an httpx.MockTransport."""

    def __init__(self):
        self.requests: list[dict] = []
        self.status_code = 200
        self.raise_timeout = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.raise_timeout:
            raise httpx.ReadTimeout("signer timed out", request=request)
        payload = json.loads(request.content)
        self.requests.append(payload)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "signing failed"})
        return httpx.Response(
            200,
            content=FAKE_PKPASS,
            headers={"X-Pass-Serial": payload["serialNumber"]},
        )


@pytest.fixture
def signer_stub() -> SignerStub:
    return SignerStub()


@pytest.fixture
def services(signer_stub: SignerStub) -> Services:
    """Container backed by a private in-memory SQLite database."""
    container = build_services(
        "sqlite://",
        base_url=TEST_BASE_URL,
        uid_secret="test-uid-secret",
        token_secret="test-token-secret",
        token_rounds=TEST_BCRYPT_ROUNDS,
        signer=PassSigner(TEST_SIGNER_URL, timeout=2.0, transport=httpx.MockTransport(signer_stub)),
        rate_limits=TEST_RATE_LIMITS,
        default_country_code="1",
    )
    yield container
    container.close()


@pytest.fixture
async def client(services: Services) -> AsyncGenerator[AsyncClient, None]:
    """Test client for API testing against the in-memory container."""
    app = create_app(services)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as async_client:
        yield async_client


CLAIM_BODY = {
    "name": "Ada  Lovelace",
    "email": " Ada@Example.com ",
    "phone": "(415) 555-0123",
}


async def claim_member(client: AsyncClient, **overrides) -> dict:
    """POST /claim and return the JSON body (asserts 200)."""
    body = {**CLAIM_BODY, **overrides}
    response = await client.post("/claim", json=body)
    assert response.status_code == 200, response.text
    return response.json()

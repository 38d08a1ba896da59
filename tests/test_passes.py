"""Tests for pass URL hygiene, payload building and the signer client."""
from datetime import datetime

import httpx
import pytest

from goldpass.db.store import MemberRecord
from goldpass.exceptions import PassGenerationFailed, PassPayloadError
from goldpass.passes import PassPayloadBuilder, PassSigner, require_https_url, sanitize_url
from goldpass.passes.urls import is_https_url


def make_member(**overrides) -> MemberRecord:
    values = dict(
        uid="hu_abcdefghijklmnop",
        name="Ada Lovelace",
        email="ada@example.com",
        phone_e164="+14155550123",
        edit_token_hash="x",
        public_url="https://gold.test/u/hu_abcdefghijklmnop",
        profile_url="https://gold.test/s/1a2b3c4d",
        created_at=datetime(2026, 1, 2, 3, 4, 5),
    )
    values.update(overrides)
    return MemberRecord(**values)


class TestUrls:

    @pytest.mark.parametrize("raw", [
        "https://gold.test/u/hu_abc",
        "https://gold.test/s/\n1a2b3c4d",
        " https://gold.test/complete/hu_abc?token=ab -\tcd ",
        "",
        "\n\t ",
    ])
    def test_sanitize_is_idempotent(self, raw):
        once = sanitize_url(raw)
        assert sanitize_url(once) == once
        assert not any(c.isspace() for c in once)

    def test_sanitize_joins_broken_url(self):
        assert sanitize_url("https://gold.test/s/\n1a2b 3c4d") == "https://gold.test/s/1a2b3c4d"

    def test_require_https_returns_cleaned(self):
        assert require_https_url("https://gold.test/u/\nhu_abc") == "https://gold.test/u/hu_abc"

    @pytest.mark.parametrize("bad", ["http://gold.test/u/x", "https://", "gold.test/u/x", "", "javascript:alert(1)"])
    def test_require_https_rejects(self, bad):
        with pytest.raises(PassPayloadError):
            require_https_url(bad, field="barcode.message")

    def test_is_https_url(self):
        assert is_https_url("https://gold.test")
        assert not is_https_url("https://gold .test")


class TestPayloadBuilder:

    def test_gold_serial_and_barcode(self):
        payload = PassPayloadBuilder("gold").build(make_member())
        data = payload.to_dict()
        assert payload.serial_number == "HUSHH-GOLD-hu_abcdefghijklmnop"
        assert data["serialNumber"] == payload.serial_number
        assert data["barcode"]["message"] == "https://gold.test/u/hu_abcdefghijklmnop"
        assert data["barcodes"][0]["message"] == data["barcode"]["message"]
        assert data["formatVersion"] == 1

    def test_barcode_never_carries_profile_url(self):
        data = PassPayloadBuilder().build(make_member()).to_dict()
        assert "/s/" not in data["barcode"]["message"]
        back = {f["key"]: f["value"] for f in data["backFields"]}
        assert back["complete_profile"].endswith("https://gold.test/s/1a2b3c4d")

    def test_family_prefixes(self):
        member = make_member()
        assert PassPayloadBuilder("personal").build(member).serial_number.startswith("HUSHH-PERSONAL-")
        assert PassPayloadBuilder("brand").build(member).serial_number.startswith("HUSHH-BRAND-")

    def test_unknown_family(self):
        with pytest.raises(ValueError):
            PassPayloadBuilder("platinum")

    def test_identity_ignores_relevant_date(self):
        builder = PassPayloadBuilder()
        member = make_member()
        first = builder.build(member, relevant_date=datetime(2026, 5, 1, 9, 0))
        second = builder.build(member, relevant_date=datetime(2026, 5, 2, 9, 0))
        assert first.identity() == second.identity()
        assert first.to_dict() != second.to_dict()
        assert "relevantDate" not in first.identity()
        assert first.to_dict()["relevantDate"] == "2026-05-01T09:00:00"

    def test_whitespace_in_urls_is_removed(self):
        member = make_member(profile_url="https://gold.test/s/\n1a2b3c4d", public_url="https://gold.test/u/ hu_x")
        data = PassPayloadBuilder().build(member).to_dict()
        assert data["barcode"]["message"] == "https://gold.test/u/hu_x"

    def test_invalid_url_produces_no_payload(self):
        with pytest.raises(PassPayloadError) as exc_info:
            PassPayloadBuilder().build(make_member(profile_url="http://gold.test/s/1a2b3c4d"))
        assert exc_info.value.field == "backFields.complete_profile"


class TestPassSigner:

    @pytest.mark.asyncio
    async def test_sign_success(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"PKdata", headers={"X-Pass-Serial": "HUSHH-GOLD-hu_x"})

        signer = PassSigner("https://signer.test/sign", transport=httpx.MockTransport(handler))
        signed = await signer.sign(PassPayloadBuilder().build(make_member()))
        assert signed.data == b"PKdata"
        assert signed.serial == "HUSHH-GOLD-hu_x"

    @pytest.mark.asyncio
    async def test_serial_falls_back_to_payload(self):
        signer = PassSigner(
            "https://signer.test/sign",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"PKdata")),
        )
        payload = PassPayloadBuilder().build(make_member())
        assert (await signer.sign(payload)).serial == payload.serial_number

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [httpx.Response(500), httpx.Response(200, content=b"")])
    async def test_bad_response_fails(self, response):
        signer = PassSigner("https://signer.test/sign", transport=httpx.MockTransport(lambda request: response))
        with pytest.raises(PassGenerationFailed):
            await signer.sign(PassPayloadBuilder().build(make_member()))

    @pytest.mark.asyncio
    async def test_timeout_fails(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("too slow", request=request)

        signer = PassSigner("https://signer.test/sign", transport=httpx.MockTransport(handler))
        with pytest.raises(PassGenerationFailed) as exc_info:
            await signer.sign(PassPayloadBuilder().build(make_member()))
        assert exc_info.value.reason == "timeout"
        assert exc_info.value.status_code == 503

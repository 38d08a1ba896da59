"""Tests for edit/owner token generation and verification."""
import hashlib
import re

import pytest

from goldpass.auth.tokens import TokenManager, strip_separators


@pytest.fixture
def tokens() -> TokenManager:
    return TokenManager("test-token-secret", rounds=4)


class TestGeneration:

    def test_edit_token_format(self, tokens):
        token = tokens.generate_edit_token()
        assert re.fullmatch(r"[0-9a-f]{32}", token)
        assert token != tokens.generate_edit_token()

    def test_owner_token_format(self, tokens):
        token = tokens.generate_owner_token("hu_abc", device_id="iphone-1")
        assert re.fullmatch(r"[0-9a-f]{8}-[0-9a-f]{32}", token)

    def test_owner_binding_is_stable_per_device(self, tokens):
        a = tokens.generate_owner_token("hu_abc", device_id="iphone-1")
        b = tokens.generate_owner_token("hu_abc", device_id="iphone-1")
        c = tokens.generate_owner_token("hu_abc", device_id="ipad-2")
        assert a[:8] == b[:8]
        assert a[:8] != c[:8]
        assert a != b


class TestVerification:

    def test_round_trip(self, tokens):
        token = tokens.generate_edit_token()
        stored = tokens.hash_token(token)
        assert stored != token
        assert tokens.verify_token(token, stored)

    def test_owner_token_without_hyphen(self, tokens):
        token = tokens.generate_owner_token("hu_abc")
        stored = tokens.hash_token(token)
        assert tokens.verify_token(token, stored)
        assert tokens.verify_token(token.replace("-", ""), stored)

    def test_token_mangled_by_whitespace(self, tokens):
        token = tokens.generate_owner_token("hu_abc")
        stored = tokens.hash_token(token)
        mangled = token.replace("-", "-\n")
        assert tokens.verify_token(mangled, stored)

    def test_wrong_token(self, tokens):
        stored = tokens.hash_token(tokens.generate_edit_token())
        assert not tokens.verify_token(tokens.generate_edit_token(), stored)

    def test_other_secret_rejects(self, tokens):
        token = tokens.generate_edit_token()
        stored = tokens.hash_token(token)
        assert not TokenManager("another-secret", rounds=4).verify_token(token, stored)

    @pytest.mark.parametrize("presented,stored", [(None, "x"), ("", "x"), ("abc", None), ("abc", "")])
    def test_missing_inputs(self, tokens, presented, stored):
        assert tokens.verify_token(presented, stored) is False

    def test_malformed_stored_hash(self, tokens):
        assert tokens.verify_token("abc", "$2b$not-a-real-hash") is False

    def test_legacy_sha256_hash(self, tokens):
        token = "0123456789abcdef0123456789abcdef"
        legacy = hashlib.sha256(token.encode()).hexdigest()
        assert tokens.verify_token(token, legacy)
        assert not tokens.verify_token("f" * 32, legacy)


def test_strip_separators():
    assert strip_separators("ab-cd ef\n12") == "abcdef12"

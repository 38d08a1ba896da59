"""Tests for identity canonicalization, UID derivation and profile validation."""
import pytest

from goldpass.exceptions import ValidationError
from goldpass.identity import UID_PREFIX, UidDeriver, canonicalize, normalize_phone, validate_profile
from goldpass.identity.uid import UID_LENGTH


class TestCanonicalize:
    """Normalization of raw claim input."""

    def test_normalizes_all_fields(self):
        identity = canonicalize("  Ada   Lovelace ", " ADA@Example.COM ", "415.555.0123")
        assert identity.name == "Ada Lovelace"
        assert identity.email == "ada@example.com"
        assert identity.phone_e164 == "+14155550123"

    def test_reports_every_failing_field(self):
        with pytest.raises(ValidationError) as exc_info:
            canonicalize("A", "not-an-email", "123")
        errors = exc_info.value.errors
        assert len(errors) == 3
        assert any("Name" in e for e in errors)
        assert "Invalid email format" in errors
        assert any("Phone" in e for e in errors)

    def test_missing_fields_are_required(self):
        with pytest.raises(ValidationError) as exc_info:
            canonicalize(None, "", None)
        assert exc_info.value.errors == [
            "Name is required",
            "Email is required",
            "Phone number is required",
        ]

    def test_name_length_bounds(self):
        with pytest.raises(ValidationError):
            canonicalize("x" * 51, "a@b.co", "4155550123")
        assert canonicalize("Al", "a@b.co", "4155550123").name == "Al"


class TestNormalizePhone:
    """E.164 normalization."""

    @pytest.mark.parametrize("raw", ["4155550123", "(415) 555-0123", "1-415-555-0123", "+1 415 555 0123"])
    def test_us_formats(self, raw):
        assert normalize_phone(raw) == "+14155550123"

    def test_international_number_kept(self):
        assert normalize_phone("+44 20 7946 0958") == "+442079460958"

    def test_other_default_country(self):
        assert normalize_phone("2079460958", default_country_code="44") == "+442079460958"

    @pytest.mark.parametrize("raw", ["+0123456789", "+1234567", "555-0123", "415555012x", "+1234567890123456"])
    def test_rejects_invalid(self, raw):
        with pytest.raises(ValidationError):
            normalize_phone(raw)

    @pytest.mark.parametrize(
        "raw",
        [
            "+1٤١٥٥٥٥٠١٢٣",
            "٤١٥٥٥٥٠١٢٣",
            "４１５５５５０１２３",
        ],
    )
    def test_rejects_non_ascii_digits(self, raw):
        with pytest.raises(ValidationError):
            normalize_phone(raw)
        with pytest.raises(ValidationError):
            canonicalize("Ada Lovelace", "ada@example.com", raw)



class TestUidDeriver:
    """Deterministic UID generation."""

    def test_same_identity_same_uid(self):
        deriver = UidDeriver("secret")
        a = deriver.derive(canonicalize("Ada Lovelace", "ada@example.com", "4155550123"))
        b = deriver.derive(canonicalize("  ada  LOVELACE", "ADA@example.com ", "+1 (415) 555-0123"))
        assert a == b

    def test_format(self):
        uid = UidDeriver("secret").derive(canonicalize("Ada Lovelace", "ada@example.com", "4155550123"))
        assert uid.startswith(UID_PREFIX)
        assert len(uid) == UID_LENGTH == 19
        assert uid[len(UID_PREFIX):].isalnum()
        assert uid == uid.lower()

    def test_different_identity_different_uid(self):
        deriver = UidDeriver("secret")
        a = deriver.derive(canonicalize("Ada Lovelace", "ada@example.com", "4155550123"))
        b = deriver.derive(canonicalize("Ada Lovelace", "ada@example.org", "4155550123"))
        assert a != b

    def test_secret_changes_uid(self):
        identity = canonicalize("Ada Lovelace", "ada@example.com", "4155550123")
        assert UidDeriver("one").derive(identity) != UidDeriver("two").derive(identity)

    def test_hash_input_order(self):
        identity = canonicalize("Ada Lovelace", "ada@example.com", "4155550123")
        assert UidDeriver.hash_input(identity) == "ada@example.com|+14155550123|ada lovelace"

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            UidDeriver("")


class TestValidateProfile:
    """Profile-completion field rules."""

    def test_normalizes_valid_fields(self):
        changes = validate_profile(
            city=" San Francisco ", state="ca", zip_code="94102-1234", gender="Female", age=28, street1="1 Market St"
        )
        assert changes["profile_city"] == "San Francisco"
        assert changes["profile_state"] == "CA"
        assert changes["profile_zip"] == "94102-1234"
        assert changes["profile_gender"] == "female"
        assert changes["profile_age"] == 28
        assert changes["profile_street1"] == "1 Market St"
        assert changes["profile_last_updated_at"] is not None

    def test_all_errors_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_profile(city="X", state="ZZ", zip_code="9410", gender="other", age=12, street1="s" * 101)
        assert len(exc_info.value.errors) == 6

    def test_nothing_submitted(self):
        assert validate_profile() == {}

    def test_age_upper_bound(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_profile(age=121)
        assert exc_info.value.errors == ["Invalid age"]

    def test_age_parsed_from_string(self):
        assert validate_profile(age=" 30 ")["profile_age"] == 30

    @pytest.mark.parametrize("age", ["abc", "30.5", "-5", True])
    def test_age_must_be_whole_number(self, age):
        with pytest.raises(ValidationError) as exc_info:
            validate_profile(state="XX", age=age)
        assert exc_info.value.errors == ["Invalid US state code", "Age must be a whole number"]

    def test_zip_requires_ascii_digits(self):
        with pytest.raises(ValidationError):
            validate_profile(zip_code="٩٤١٠٢")

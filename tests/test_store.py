"""Tests for the member store adapter and short links."""
import pytest

from goldpass.db.models import Base, Member, ShortUrl
from goldpass.db.session import session_scope
from goldpass.db.store import MemberRecord
from goldpass.exceptions import NotFoundError, ShortLinkCollisionError, StoreUnavailableError
from goldpass.services import Services


def new_member(uid: str = "hu_aaaaaaaaaaaaaaaa", **overrides) -> MemberRecord:
    values = dict(
        uid=uid,
        name="Ada Lovelace",
        email="ada@example.com",
        phone_e164="+14155550123",
        edit_token_hash="hash",
        public_url=f"https://gold.test/u/{uid}",
        profile_url=f"https://gold.test/complete/{uid}?token=abc",
    )
    values.update(overrides)
    return MemberRecord(**values)


class TestMemberStore:

    def test_insert_and_find(self, services: Services):
        assert services.store.insert(new_member()) is True
        found = services.store.find_by_uid("hu_aaaaaaaaaaaaaaaa")
        assert found.name == "Ada Lovelace"
        assert found.pass_status == "active"
        assert found.tier == "gold"
        assert found.created_at is not None

    def test_find_missing(self, services: Services):
        assert services.store.find_by_uid("hu_missing") is None

    def test_duplicate_insert_is_not_an_error(self, services: Services):
        assert services.store.insert(new_member()) is True
        assert services.store.insert(new_member(name="Someone Else")) is False
        assert services.store.find_by_uid("hu_aaaaaaaaaaaaaaaa").name == "Ada Lovelace"

    def test_update(self, services: Services):
        services.store.insert(new_member())
        assert services.store.update("hu_aaaaaaaaaaaaaaaa", profile_city="Boston") is True
        assert services.store.find_by_uid("hu_aaaaaaaaaaaaaaaa").profile_city == "Boston"

    def test_update_missing_member(self, services: Services):
        assert services.store.update("hu_missing", profile_city="Boston") is False

    def test_update_rejects_unknown_and_immutable_fields(self, services: Services):
        with pytest.raises(ValueError):
            services.store.update("hu_aaaaaaaaaaaaaaaa", nickname="x")
        with pytest.raises(ValueError):
            services.store.update("hu_aaaaaaaaaaaaaaaa", uid="hu_other")

    def test_touch_last_seen(self, services: Services):
        services.store.insert(new_member())
        assert services.store.touch_last_seen("hu_aaaaaaaaaaaaaaaa") is True
        assert services.store.find_by_uid("hu_aaaaaaaaaaaaaaaa").last_seen_at is not None

    def test_unknown_status_reads_as_voided(self, services: Services):
        services.store.insert(new_member())
        with session_scope(services.session_factory) as db:
            db.get(Member, "hu_aaaaaaaaaaaaaaaa").pass_status = "suspended"
        member = services.store.find_by_uid("hu_aaaaaaaaaaaaaaaa")
        assert member.pass_status == "voided"
        assert not member.is_active

    def test_list_without_short_links(self, services: Services):
        services.store.insert(new_member("hu_aaaaaaaaaaaaaaaa"))
        services.store.insert(new_member("hu_bbbbbbbbbbbbbbbb"))
        services.short_links.create("hu_aaaaaaaaaaaaaaaa", "token")
        pending = services.store.list_without_short_links()
        assert [m.uid for m in pending] == ["hu_bbbbbbbbbbbbbbbb"]
        assert len(services.store.list_all()) == 2

    def test_store_failure_is_unavailable(self, services: Services):
        Base.metadata.drop_all(services.engine)
        with pytest.raises(StoreUnavailableError):
            services.store.find_by_uid("hu_aaaaaaaaaaaaaaaa")
        with pytest.raises(StoreUnavailableError):
            services.store.insert(new_member())


class TestShortLinks:

    def test_round_trip(self, services: Services):
        services.store.insert(new_member())
        short_id = services.short_links.create("hu_aaaaaaaaaaaaaaaa", "secret-token")
        assert len(short_id) == 8
        target = services.short_links.resolve(short_id)
        assert target.uid == "hu_aaaaaaaaaaaaaaaa"
        assert target.token == "secret-token"
        assert services.short_links.completion_url(target) == (
            "https://gold.test/complete/hu_aaaaaaaaaaaaaaaa?token=secret-token"
        )

    def test_short_url(self, services: Services):
        assert services.short_links.create_short_url("1a2b3c4d") == "https://gold.test/s/1a2b3c4d"

    def test_unknown_id(self, services: Services):
        with pytest.raises(NotFoundError):
            services.short_links.resolve("deadbeef")

    @pytest.mark.parametrize("short_id", ["", "DEADBEEF", "dead", "deadbeef00", "../etc/x"])
    def test_malformed_id(self, services: Services, short_id):
        with pytest.raises(NotFoundError):
            services.short_links.resolve(short_id)

    def test_collision_retries_once(self, services: Services):
        services.store.insert(new_member())
        services.short_links.create("hu_aaaaaaaaaaaaaaaa", "t1", short_id="aaaaaaaa")
        second = services.short_links.create("hu_aaaaaaaaaaaaaaaa", "t2", short_id="aaaaaaaa")
        assert second != "aaaaaaaa"
        assert services.short_links.resolve(second).token == "t2"

    def test_second_collision_raises(self, services: Services, monkeypatch):
        services.store.insert(new_member())
        services.short_links.create("hu_aaaaaaaaaaaaaaaa", "t1", short_id="aaaaaaaa")
        monkeypatch.setattr("goldpass.links.shortlinks.generate_short_id", lambda: "aaaaaaaa")
        with pytest.raises(ShortLinkCollisionError):
            services.short_links.create("hu_aaaaaaaaaaaaaaaa", "t2")

    def test_record_access(self, services: Services):
        services.store.insert(new_member())
        short_id = services.short_links.create("hu_aaaaaaaaaaaaaaaa", "t1")
        services.short_links.record_access(short_id)
        services.short_links.record_access(short_id)
        with session_scope(services.session_factory) as db:
            assert db.get(ShortUrl, short_id).access_count == 2

    def test_record_access_swallows_failures(self, services: Services):
        Base.metadata.drop_all(services.engine)
        services.short_links.record_access("deadbeef")

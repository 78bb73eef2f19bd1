"""
Tests for UserService: registration, login, updates, deletion and the follow graph.
"""
import pytest

from social_api.app.core.errors import (
    BadRequest,
    Conflict,
    Forbidden,
    InternalError,
    NotFound,
    Unauthorized,
    UnprocessableIdentifier,
)
from social_api.app.schemas.user import CallerData, FollowRequest, Relationship, UserUpdate
from tests.conftest import MALFORMED_ID, MISSING_ID, USERS


async def _register(user_service, index=0):
    user = USERS[index]
    return await user_service.create_user(user["username"], user["email"], user["password"])


class TestCreateUser:

    @pytest.mark.asyncio
    async def test_returns_identifier(self, user_service, user_store):
        user_id = await _register(user_service)
        stored = await user_store.find_by_id(user_id)
        assert stored.username == "alice"
        assert stored.password != USERS[0]["password"]

    @pytest.mark.asyncio
    async def test_email_is_lowercased(self, user_service, user_store):
        user_id = await user_service.create_user("dave", "Dave@Example.COM", "davepassword")
        stored = await user_store.find_by_id(user_id)
        assert stored.email == "dave@example.com"

    @pytest.mark.asyncio
    async def test_duplicate_username_conflicts(self, user_service):
        await _register(user_service)
        with pytest.raises(Conflict) as excinfo:
            await user_service.create_user("alice", "other@example.com", "otherpassword")
        assert excinfo.value.status_code == 409
        assert excinfo.value.message == "Username or email already exists"

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, user_service):
        await _register(user_service)
        with pytest.raises(Conflict):
            await user_service.create_user("someone", "ALICE@example.com", "otherpassword")

    @pytest.mark.asyncio
    async def test_store_failure_is_internal_error(self, user_service, monkeypatch):
        async def broken(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(user_service.user_store, "create", broken)
        with pytest.raises(InternalError) as excinfo:
            await _register(user_service)
        assert excinfo.value.status_code == 500
        assert "disk full" not in excinfo.value.message


class TestLogin:

    @pytest.mark.asyncio
    async def test_correct_credentials(self, user_service):
        user_id = await _register(user_service)
        assert await user_service.login("alice@example.com", "alicepassword") == user_id

    @pytest.mark.asyncio
    async def test_unknown_email(self, user_service):
        await _register(user_service)
        with pytest.raises(Unauthorized) as excinfo:
            await user_service.login("nobody@example.com", "alicepassword")
        assert excinfo.value.message == "Email is incorrect."

    @pytest.mark.asyncio
    async def test_wrong_password(self, user_service):
        await _register(user_service)
        with pytest.raises(Unauthorized) as excinfo:
            await user_service.login("alice@example.com", "wrongpassword")
        assert excinfo.value.message == "Password is incorrect."


class TestPartialUpdate:

    @pytest.mark.asyncio
    async def test_self_update(self, user_service, user_store):
        user_id = await _register(user_service)
        updates = UserUpdate(city="Lisbon", relationship=Relationship.MARRIED, **{"from": "Porto"})
        result = await user_service.partial_update(user_id, CallerData(user_id=user_id), updates)
        assert result == user_id
        stored = await user_store.find_by_id(user_id)
        assert stored.city == "Lisbon"
        assert stored.from_ == "Porto"
        assert stored.relationship is Relationship.MARRIED

    @pytest.mark.asyncio
    async def test_unknown_fields_are_dropped(self, user_service, user_store):
        user_id = await _register(user_service)
        updates = UserUpdate.model_validate({"desc": "hello", "isAdmin": True, "createdAt": "x"})
        await user_service.partial_update(user_id, CallerData(user_id=user_id), updates)
        stored = await user_store.find_by_id(user_id)
        assert stored.desc == "hello"
        assert stored.is_admin is False

    @pytest.mark.asyncio
    async def test_password_is_rehashed(self, user_service):
        user_id = await _register(user_service)
        await user_service.partial_update(
            user_id, CallerData(user_id=user_id), UserUpdate(password="brandnewpassword")
        )
        assert await user_service.login("alice@example.com", "brandnewpassword") == user_id
        with pytest.raises(Unauthorized):
            await user_service.login("alice@example.com", "alicepassword")

    @pytest.mark.asyncio
    async def test_own_identifier_in_follow_lists_is_rejected(self, user_service, user_store):
        alice = await _register(user_service, 0)
        bob = await _register(user_service, 1)
        for updates in (UserUpdate(followers=[bob, alice]), UserUpdate(followings=[alice])):
            with pytest.raises(BadRequest) as excinfo:
                await user_service.partial_update(alice, CallerData(user_id=alice), updates)
            assert excinfo.value.message == "Cannot follow yourself"
        stored = await user_store.find_by_id(alice)
        assert stored.followers == [] and stored.followings == []

        await user_service.partial_update(alice, CallerData(user_id=alice), UserUpdate(followers=[bob]))
        assert (await user_store.find_by_id(alice)).followers == [bob]

    @pytest.mark.asyncio
    async def test_other_user_forbidden(self, user_service):
        alice = await _register(user_service, 0)
        bob = await _register(user_service, 1)
        with pytest.raises(Forbidden) as excinfo:
            await user_service.partial_update(alice, CallerData(user_id=bob), UserUpdate(city="x"))
        assert excinfo.value.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_passes_authorization(self, user_service):
        alice = await _register(user_service, 0)
        bob = await _register(user_service, 1)
        result = await user_service.partial_update(
            alice, CallerData(user_id=bob, is_admin=True), UserUpdate(city="x")
        )
        # The caller's own document is the one written.
        assert result == bob

    @pytest.mark.asyncio
    async def test_missing_caller(self, user_service):
        await _register(user_service)
        with pytest.raises(NotFound) as excinfo:
            await user_service.partial_update(MISSING_ID, CallerData(user_id=MISSING_ID), UserUpdate())
        assert excinfo.value.message == "User not found."

    @pytest.mark.asyncio
    async def test_malformed_identifier(self, user_service):
        with pytest.raises(UnprocessableIdentifier) as excinfo:
            await user_service.partial_update(MALFORMED_ID, CallerData(user_id=MALFORMED_ID), UserUpdate())
        assert excinfo.value.status_code == 422

    @pytest.mark.asyncio
    async def test_duplicate_username_on_update_is_unprocessable(self, user_service):
        alice = await _register(user_service, 0)
        await _register(user_service, 1)
        with pytest.raises(UnprocessableIdentifier):
            await user_service.partial_update(alice, CallerData(user_id=alice), UserUpdate(username="bob"))


class TestDelete:

    @pytest.mark.asyncio
    async def test_self_delete(self, user_service, user_store):
        user_id = await _register(user_service)
        assert await user_service.delete(user_id, CallerData(user_id=user_id)) == user_id
        assert await user_store.find_by_id(user_id) is None

    @pytest.mark.asyncio
    async def test_other_user_forbidden(self, user_service):
        alice = await _register(user_service, 0)
        with pytest.raises(Forbidden):
            await user_service.delete(alice, CallerData(user_id=MISSING_ID))

    @pytest.mark.asyncio
    async def test_missing_caller(self, user_service):
        with pytest.raises(NotFound):
            await user_service.delete(MISSING_ID, CallerData(user_id=MISSING_ID))

    @pytest.mark.asyncio
    async def test_malformed_identifier(self, user_service):
        with pytest.raises(UnprocessableIdentifier):
            await user_service.delete(MALFORMED_ID, CallerData(user_id=MALFORMED_ID))


class TestFindUser:

    @pytest.mark.asyncio
    async def test_profile_hides_password_and_timestamps(self, user_service):
        user_id = await _register(user_service)
        profile = await user_service.find_user(user_id)
        dumped = profile.model_dump(by_alias=True)
        assert dumped["_id"] == user_id
        assert dumped["username"] == "alice"
        assert "password" not in dumped
        assert "createdAt" not in dumped
        assert "updatedAt" not in dumped

    @pytest.mark.asyncio
    async def test_missing_user(self, user_service):
        with pytest.raises(NotFound):
            await user_service.find_user(MISSING_ID)

    @pytest.mark.asyncio
    async def test_malformed_identifier(self, user_service):
        with pytest.raises(UnprocessableIdentifier) as excinfo:
            await user_service.find_user(MALFORMED_ID)
        assert excinfo.value.message == "_id length is incorrect"


class TestFollow:

    @pytest.mark.asyncio
    async def test_follow_updates_both_sides(self, user_service, user_store):
        alice = await _register(user_service, 0)
        bob = await _register(user_service, 1)
        assert await user_service.follow(alice, FollowRequest(user_id=bob)) == "bob"
        assert (await user_store.find_by_id(bob)).followers == [alice]
        assert (await user_store.find_by_id(alice)).followings == [bob]

    @pytest.mark.asyncio
    async def test_missing_target(self, user_service):
        alice = await _register(user_service)
        with pytest.raises(BadRequest) as excinfo:
            await user_service.follow(alice, FollowRequest())
        assert excinfo.value.message == "missing or invalid data"

    @pytest.mark.asyncio
    async def test_follow_self(self, user_service):
        alice = await _register(user_service)
        with pytest.raises(BadRequest) as excinfo:
            await user_service.follow(alice, FollowRequest(user_id=alice))
        assert excinfo.value.message == "Cannot follow yourself"

    @pytest.mark.asyncio
    async def test_unknown_current_user(self, user_service):
        alice = await _register(user_service)
        with pytest.raises(NotFound) as excinfo:
            await user_service.follow(MISSING_ID, FollowRequest(user_id=alice))
        assert excinfo.value.message == "User doesn't exists"

    @pytest.mark.asyncio
    async def test_unknown_target(self, user_service):
        alice = await _register(user_service)
        with pytest.raises(NotFound) as excinfo:
            await user_service.follow(alice, FollowRequest(user_id=MISSING_ID))
        assert excinfo.value.message == "User you want to follow doesn't exists"

    @pytest.mark.asyncio
    async def test_already_following(self, user_service, user_store):
        alice = await _register(user_service, 0)
        bob = await _register(user_service, 1)
        await user_service.follow(alice, FollowRequest(user_id=bob))
        with pytest.raises(Conflict):
            await user_service.follow(alice, FollowRequest(user_id=bob))
        assert (await user_store.find_by_id(bob)).followers == [alice]

    @pytest.mark.asyncio
    async def test_malformed_identifier(self, user_service):
        bob = await _register(user_service, 1)
        with pytest.raises(UnprocessableIdentifier):
            await user_service.follow(MALFORMED_ID, FollowRequest(user_id=bob))


class TestUnfollow:

    @pytest.mark.asyncio
    async def test_follow_then_unfollow_restores_graph(self, user_service, user_store):
        alice = await _register(user_service, 0)
        bob = await _register(user_service, 1)
        carol = await _register(user_service, 2)
        await user_service.follow(carol, FollowRequest(user_id=bob))
        before_alice = (await user_store.find_by_id(alice)).followings
        before_bob = (await user_store.find_by_id(bob)).followers

        await user_service.follow(alice, FollowRequest(user_id=bob))
        assert await user_service.unfollow(alice, FollowRequest(user_id=bob)) == "bob"

        assert (await user_store.find_by_id(alice)).followings == before_alice
        assert (await user_store.find_by_id(bob)).followers == before_bob == [carol]

    @pytest.mark.asyncio
    async def test_not_following(self, user_service):
        alice = await _register(user_service, 0)
        bob = await _register(user_service, 1)
        with pytest.raises(NotFound) as excinfo:
            await user_service.unfollow(alice, FollowRequest(user_id=bob))
        assert excinfo.value.message == "User is not part of users you follow"

    @pytest.mark.asyncio
    async def test_missing_target(self, user_service):
        alice = await _register(user_service)
        with pytest.raises(BadRequest):
            await user_service.unfollow(alice, FollowRequest())

    @pytest.mark.asyncio
    async def test_unfollow_self(self, user_service):
        alice = await _register(user_service)
        with pytest.raises(BadRequest):
            await user_service.unfollow(alice, FollowRequest(user_id=alice))

    @pytest.mark.asyncio
    async def test_unknown_target(self, user_service):
        alice = await _register(user_service)
        with pytest.raises(NotFound) as excinfo:
            await user_service.unfollow(alice, FollowRequest(user_id=MISSING_ID))
        assert excinfo.value.message == "User you want to unfollow doesn't exists"

    @pytest.mark.asyncio
    async def test_malformed_identifier(self, user_service):
        bob = await _register(user_service, 1)
        with pytest.raises(UnprocessableIdentifier):
            await user_service.unfollow(MALFORMED_ID, FollowRequest(user_id=bob))

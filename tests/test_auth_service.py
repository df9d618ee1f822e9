"""
Tests for AuthService: registration, login and refresh-token rotation,
including translation of unexpected store failures.
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from models.refresh_token import RefreshToken
from models.user import User
from utils.exceptions import (
    DuplicateUser,
    InvalidCredentials,
    InvalidToken,
    LoginFailed,
    MissingToken,
    RegistrationFailed,
    TokenRefreshFailed,
    UnknownToken,
)


def _db_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("database is gone"))


class TestRegister:
    def test_creates_user_with_hashed_password(self, service, storage):
        user = service.register("alice", "a@x.com", "pw1")
        stored = storage.get(User, user.id)
        assert stored.username == "alice"
        assert stored.password_hash != "pw1"
        assert stored.password_hash.startswith("$argon2")

    def test_duplicate_email(self, service):
        service.register("alice", "a@x.com", "pw1")
        with pytest.raises(DuplicateUser):
            service.register("bob", "a@x.com", "something-else")

    def test_concurrent_duplicate_is_reported_as_duplicate(self, service, monkeypatch):
        service.register("alice", "a@x.com", "pw1")
        # the existence check misses, the unique constraint catches it
        monkeypatch.setattr(service.users, "find_by_email", lambda email: None)
        with pytest.raises(DuplicateUser):
            service.register("alice", "a@x.com", "pw1")

    def test_store_failure_is_opaque(self, service, storage, monkeypatch):
        monkeypatch.setattr(service.users, "create", _db_down)
        with pytest.raises(RegistrationFailed) as excinfo:
            service.register("alice", "a@x.com", "pw1")
        assert str(excinfo.value) == "Registration failed"
        assert storage.count(User) == 0


class TestLogin:
    def test_returns_pair_and_stores_refresh_token(self, service, storage):
        user = service.register("alice", "a@x.com", "pw1")
        tokens = service.login("a@x.com", "pw1")
        record = storage.find_one(RefreshToken, token=tokens.refresh_token)
        assert record is not None
        assert record.user_id == user.id
        assert service.issuer.verify_access(tokens.access_token).claims == {
            "email": "a@x.com", "id": user.id, "username": "alice",
        }

    def test_wrong_password_and_unknown_email_are_identical(self, service):
        service.register("alice", "a@x.com", "pw1")
        with pytest.raises(InvalidCredentials) as wrong_password:
            service.login("a@x.com", "pw2")
        with pytest.raises(InvalidCredentials) as unknown_email:
            service.login("nobody@x.com", "pw1")
        assert wrong_password.value.to_dict() == unknown_email.value.to_dict()

    def test_corrupt_hash_is_login_failed(self, service, storage):
        user = service.register("alice", "a@x.com", "pw1")
        user.password_hash = "garbage"
        storage.save()
        with pytest.raises(LoginFailed):
            service.login("a@x.com", "pw1")

    def test_store_failure_is_login_failed(self, service, monkeypatch):
        service.register("alice", "a@x.com", "pw1")
        monkeypatch.setattr(service.refresh_tokens, "create", _db_down)
        with pytest.raises(LoginFailed):
            service.login("a@x.com", "pw1")


class TestRefresh:
    @pytest.fixture
    def tokens(self, service):
        service.register("alice", "a@x.com", "pw1")
        return service.login("a@x.com", "pw1")

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, service, token):
        with pytest.raises(MissingToken):
            service.refresh(token)

    def test_rotation(self, service, storage, tokens):
        new = service.refresh(tokens.refresh_token)
        assert new.refresh_token != tokens.refresh_token
        assert storage.find_one(RefreshToken, token=tokens.refresh_token) is None
        assert storage.find_one(RefreshToken, token=new.refresh_token) is not None
        assert storage.count(RefreshToken) == 1

    def test_old_token_is_single_use(self, service, tokens):
        service.refresh(tokens.refresh_token)
        with pytest.raises(UnknownToken):
            service.refresh(tokens.refresh_token)

    def test_new_token_can_be_rotated_again(self, service, tokens):
        second = service.refresh(tokens.refresh_token)
        third = service.refresh(second.refresh_token)
        assert third.refresh_token not in (tokens.refresh_token, second.refresh_token)

    def test_unknown_token(self, service, tokens):
        with pytest.raises(UnknownToken):
            service.refresh(tokens.access_token)

    def test_stored_but_wrongly_signed_token(self, service, storage, tokens):
        user = storage.find_one(User, email="a@x.com")
        # an access token is well formed but not signed with the refresh secret
        service.refresh_tokens.create(tokens.access_token, user.id)
        with pytest.raises(InvalidToken):
            service.refresh(tokens.access_token)

    def test_concurrently_consumed_token(self, service, tokens, monkeypatch):
        monkeypatch.setattr(service.refresh_tokens, "replace", lambda old, new, user_id: False)
        with pytest.raises(UnknownToken):
            service.refresh(tokens.refresh_token)

    def test_store_failure_keeps_old_token(self, service, storage, tokens, monkeypatch):
        def _insert_fails(obj):
            raise IntegrityError("INSERT", {}, Exception("boom"))

        monkeypatch.setattr(storage, "new", _insert_fails)
        with pytest.raises(TokenRefreshFailed):
            service.refresh(tokens.refresh_token)
        monkeypatch.undo()
        assert storage.find_one(RefreshToken, token=tokens.refresh_token) is not None

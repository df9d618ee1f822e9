"""
Thin stores over DBStorage.

UserStore holds credentials (users), RefreshTokenStore holds issued
refresh tokens. Both only stage and commit through the storage they are
given; uniqueness is enforced by the database constraints.
"""
from __future__ import annotations

from typing import Optional

from models.db_storage import DBStorage
from models.refresh_token import RefreshToken
from models.user import User


class UserStore:
    def __init__(self, storage: DBStorage):
        self.storage = storage

    def find_by_email(self, email: str) -> Optional[User]:
        return self.storage.find_one(User, email=email)

    def create(self, username: str, email: str, password_hash: str) -> User:
        user = User(username=username, email=email, password_hash=password_hash)
        self.storage.new(user)
        self.storage.save()
        return user

    def rollback(self):
        self.storage.rollback()


class RefreshTokenStore:
    def __init__(self, storage: DBStorage):
        self.storage = storage

    def find(self, token: str) -> Optional[RefreshToken]:
        return self.storage.find_one(RefreshToken, token=token)

    def create(self, token: str, user_id: str) -> RefreshToken:
        record = RefreshToken(token=token, user_id=user_id)
        self.storage.new(record)
        self.storage.save()
        return record

    def replace(self, old_token: str, new_token: str, user_id: str) -> bool:
        """
        Delete the row holding old_token, then insert new_token, in one commit.
        Returns False (and changes nothing) when old_token was already gone,
        e.g. consumed by a concurrent refresh.
        """
        deleted = self.storage.delete_where(RefreshToken, token=old_token)
        if deleted != 1:
            self.storage.rollback()
            return False
        # delete is flushed before the insert is staged
        self.storage.flush()
        self.storage.new(RefreshToken(token=new_token, user_id=user_id))
        self.storage.save()
        return True

    def rollback(self):
        self.storage.rollback()

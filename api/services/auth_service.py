"""
Auth controller: registration, login and refresh-token rotation.

Composes the credential store, the refresh token store and the token
issuer. Every store or crypto exception is translated here into the
error taxonomy of utils.exceptions; nothing else leaves this class.
"""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from models.stores import RefreshTokenStore, UserStore
from models.user import User
from utils.exceptions import (
    AuthError,
    DuplicateUser,
    InvalidCredentials,
    InvalidToken,
    LoginFailed,
    MissingToken,
    RegistrationFailed,
    TokenRefreshFailed,
    UnknownToken,
)
from utils.security import TokenIssuer, TokenPair, hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, users: UserStore, refresh_tokens: RefreshTokenStore, issuer: TokenIssuer):
        self.users = users
        self.refresh_tokens = refresh_tokens
        self.issuer = issuer

    def register(self, username: str, email: str, password: str) -> User:
        try:
            if self.users.find_by_email(email) is not None:
                raise DuplicateUser()
            user = self.users.create(
                username=username,
                email=email,
                password_hash=hash_password(password),
            )
        except AuthError:
            raise
        except IntegrityError:
            # lost a race against a concurrent registration of the same email
            self.users.rollback()
            raise DuplicateUser()
        except Exception:
            logger.exception("Registration failed for %s", email)
            self.users.rollback()
            raise RegistrationFailed()

        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    def login(self, email: str, password: str) -> TokenPair:
        try:
            user = self.users.find_by_email(email)
            if user is None or not verify_password(password, user.password_hash):
                raise InvalidCredentials()
            tokens = self.issuer.issue(user.claims())
            self.refresh_tokens.create(tokens.refresh_token, user.id)
        except AuthError:
            raise
        except Exception:
            logger.exception("Login failed for %s", email)
            self.refresh_tokens.rollback()
            raise LoginFailed()

        logger.info("Login: %s (%s)", user.username, user.id)
        return tokens

    def refresh(self, token: str | None) -> TokenPair:
        """
        Exchange a stored refresh token for a new pair.
        The presented token is consumed: a second call with it fails with UnknownToken.
        """
        if not token:
            raise MissingToken()

        try:
            if self.refresh_tokens.find(token) is None:
                raise UnknownToken()

            verification = self.issuer.verify_refresh(token)
            if not verification.ok:
                logger.warning("Rejected refresh token: %s", verification.reason)
                raise InvalidToken()

            claims = verification.claims
            tokens = self.issuer.issue(claims)
            if not self.refresh_tokens.replace(token, tokens.refresh_token, claims["id"]):
                raise UnknownToken()
        except AuthError:
            raise
        except Exception:
            logger.exception("Token refresh failed")
            self.refresh_tokens.rollback()
            raise TokenRefreshFailed()

        logger.info("Rotated refresh token for user %s", claims["id"])
        return tokens

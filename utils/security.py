"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Access/refresh token pair signing and verification via PyJWT
- JTI generation for token identifiers
"""
from __future__ import annotations

import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, NamedTuple, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError

from utils.exceptions import ConfigurationError

ph = PasswordHasher()

# identity fields carried by both tokens
CLAIM_FIELDS = ("email", "id", "username")

_DURATION_RE = re.compile(r"^\s*(\d+)\s*(ms|s|m|h|d|w)?\s*$", re.IGNORECASE)
_UNITS = {
    "ms": "milliseconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2.
    Only a mismatch returns False; a corrupt hash raises.
    """
    try:
        return ph.verify(password_hash, password)
    except VerifyMismatchError:
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_duration(value) -> Optional[timedelta]:
    """
    Parse an expiry such as "900", "15m", "12h" or "7d" into a timedelta.
    A bare number means seconds. Returns None for an unset value.
    """
    if value is None or value == "":
        return None
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int):
        return timedelta(seconds=value)
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_UNITS[(unit or "s").lower()]: int(amount)})


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str

    def to_dict(self) -> Dict[str, str]:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}


class TokenVerification(NamedTuple):
    """Outcome of a verify call: claims on success, reason on failure."""
    claims: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.claims is not None


class TokenIssuer:
    """
    Signs and verifies access/refresh token pairs.

    Access and refresh tokens use distinct secrets and lifetimes, so a
    token of one kind never verifies as the other.
    """

    def __init__(
        self,
        access_secret: str,
        access_expires: timedelta,
        refresh_secret: str,
        refresh_expires: timedelta,
        algorithm: str = "HS256",
    ):
        if not access_secret or not refresh_secret:
            raise ConfigurationError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be set")
        if access_secret == refresh_secret:
            raise ConfigurationError("access and refresh tokens must use distinct secrets")
        if access_expires is None or refresh_expires is None:
            raise ConfigurationError("token expiry durations must be set")
        if access_expires <= timedelta(0) or refresh_expires <= timedelta(0):
            raise ConfigurationError("token expiry durations must be positive")
        if not algorithm.startswith("HS"):
            raise ConfigurationError(f"Unsupported JWT algorithm: {algorithm}")
        self.access_secret = access_secret
        self.access_expires = access_expires
        self.refresh_secret = refresh_secret
        self.refresh_expires = refresh_expires
        self.algorithm = algorithm

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "TokenIssuer":
        try:
            access_expires = parse_duration(config.get("ACCESS_TOKEN_EXPIRES"))
            refresh_expires = parse_duration(config.get("REFRESH_TOKEN_EXPIRES"))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        return cls(
            access_secret=config.get("ACCESS_TOKEN_SECRET"),
            access_expires=access_expires,
            refresh_secret=config.get("REFRESH_TOKEN_SECRET"),
            refresh_expires=refresh_expires,
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )

    def _sign(self, claims: Mapping[str, Any], secret: str, expires: timedelta) -> str:
        now = _now()
        payload = {field: claims[field] for field in CLAIM_FIELDS}
        payload.update(
            {
                "iat": int(now.timestamp()),
                "exp": int((now + expires).timestamp()),
                "jti": generate_jti(),
            }
        )
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def issue(self, claims: Mapping[str, Any]) -> TokenPair:
        """Sign a new access/refresh pair for the claim payload {email, id, username}."""
        return TokenPair(
            access_token=self._sign(claims, self.access_secret, self.access_expires),
            refresh_token=self._sign(claims, self.refresh_secret, self.refresh_expires),
        )

    def _verify(self, token: str, secret: str) -> TokenVerification:
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            return TokenVerification(reason="Token expired")
        except jwt.InvalidTokenError as exc:
            return TokenVerification(reason=f"Invalid token: {exc}")

        if any(field not in decoded for field in CLAIM_FIELDS):
            return TokenVerification(reason="Token is missing identity claims")
        return TokenVerification(claims={field: decoded[field] for field in CLAIM_FIELDS})

    def verify_access(self, token: str) -> TokenVerification:
        return self._verify(token, self.access_secret)

    def verify_refresh(self, token: str) -> TokenVerification:
        return self._verify(token, self.refresh_secret)

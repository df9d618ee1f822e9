from __future__ import annotations
import logging
from functools import wraps
from flask import request, g, current_app
from utils.exceptions import Forbidden, Unauthenticated

logger = logging.getLogger(__name__)


def _bearer_token() -> str | None:
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def token_required():
    """
    Access guard for protected views.
    401 when no bearer token is sent, 403 when it fails verification
    against the access-token secret. On success the claim payload
    {email, id, username} is available as g.current_user.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _bearer_token()
            if not token:
                raise Unauthenticated()

            issuer = current_app.extensions["auth_service"].issuer
            verification = issuer.verify_access(token)
            if not verification.ok:
                logger.warning("Rejected access token: %s", verification.reason)
                raise Forbidden()

            g.current_user = verification.claims
            return fn(*args, **kwargs)

        return wrapper

    return decorator

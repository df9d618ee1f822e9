from flask import current_app

from .auth_service import AuthService


def get_auth_service() -> AuthService:
    """AuthService bound to the running app (built in create_app)."""
    return current_app.extensions["auth_service"]

"""
Error taxonomy of the auth service.

    AuthError (base, carries status + message)
    ├── ClientError          4xx, caused by the request
    │   ├── DuplicateUser        400
    │   ├── InvalidCredentials   401
    │   ├── MissingToken         401
    │   ├── Unauthenticated      401
    │   ├── UnknownToken         403
    │   ├── InvalidToken         403
    │   └── Forbidden            403
    └── ServerError          500, message kept generic
        ├── RegistrationFailed
        ├── LoginFailed
        └── TokenRefreshFailed

ConfigurationError is raised at start-up only and never mapped to a response.
"""


class AuthError(Exception):
    status = 500
    message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ClientError(AuthError):
    status = 400
    message = "Bad request"


class DuplicateUser(ClientError):
    status = 400
    message = "User already exists"


class InvalidCredentials(ClientError):
    # same for unknown email and wrong password
    status = 401
    message = "Invalid credentials"


class MissingToken(ClientError):
    status = 401
    message = "Refresh token is required"


class Unauthenticated(ClientError):
    status = 401
    message = "Access token is required"


class UnknownToken(ClientError):
    status = 403
    message = "Refresh token is not recognized"


class InvalidToken(ClientError):
    status = 403
    message = "Invalid or expired refresh token"


class Forbidden(ClientError):
    status = 403
    message = "Invalid or expired access token"


class ServerError(AuthError):
    status = 500


class RegistrationFailed(ServerError):
    message = "Registration failed"


class LoginFailed(ServerError):
    message = "Login failed"


class TokenRefreshFailed(ServerError):
    message = "Token refresh failed"


class ConfigurationError(Exception):
    """Missing or invalid security configuration (secrets, expiry)."""

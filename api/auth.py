"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- GET  /auth/protected

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs signed with HS256,
  each kind with its own secret)
- Stores refresh tokens in DB (RefreshToken model) and rotates them: a refresh token
  is accepted exactly once
- Validates access tokens itself (utils.decorators.token_required), no flask-jwt-extended
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from models.schemas.user import UserCreateSchema, UserOutSchema, UserLoginSchema
from utils.decorators import token_required

from .services import get_auth_service

bp = Blueprint("auth", __name__, url_prefix="/auth")

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [username, email, password]
          properties:
            username: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      400:
        description: User already exists or invalid input
      500:
        description: Registration failed
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)

    user = get_auth_service().register(data["username"], data["email"], data["password"])

    return jsonify(
        {
            "message": "User registered successfully",
            "user": user_out_schema.dump(user),
        }
    ), 201


@bp.post("/login")
def login():
    """
    Login: return accessToken and refreshToken
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [email, password]
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials
      500:
        description: Login failed
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)

    tokens = get_auth_service().login(data["email"], data["password"])
    return jsonify(tokens.to_dict()), 200


@bp.post("/refresh")
def refresh():
    """
    Exchange a refresh token for a new token pair (rotation, old token is consumed)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             token: { type: string }
    responses:
      200:
        description: OK (returns a new accessToken and refreshToken)
      401:
        description: No token presented
      403:
        description: Unknown, already used, expired or wrongly signed token
      500:
        description: Token refresh failed
    """
    payload = request.get_json(silent=True)
    # a body that is not a JSON object carries no token
    token = payload.get("token") if isinstance(payload, dict) else None
    if not isinstance(token, str):
        token = None

    tokens = get_auth_service().refresh(token)
    return jsonify(tokens.to_dict()), 200


@bp.get("/protected")
@token_required()
def protected():
    """
    Greets the authenticated user.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: No access token
      403:
        description: Invalid or expired access token
    """
    return jsonify(
        {
            "message": f"Hello {g.current_user['username']}, this is a protected route!"
        }
    ), 200

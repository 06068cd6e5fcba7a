"""
Authentication blueprint (mounted under /api/v1/users):
- POST /register
- POST /login
- POST /logout
- POST /refresh-token
- POST /change-password

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues access tokens (24h) and refresh tokens (10 days), JWTs signed with
  separate secrets
- Keeps a single refresh token per user on the User row; a new login
  replaces it and logout clears it
- Sets HTTP-only token cookies plus a readable sessionData cookie
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.user import (
    UserCreateSchema,
    UserOutSchema,
    UserLoginSchema,
    ChangePasswordSchema,
)
from utils import credentials
from utils.decorators import (
    bearer_token,
    component,
    jwt_required,
    rate_limited,
    session_validated,
)
from utils.exceptions import Unauthorized
from utils.security import utcnow

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()
change_password_schema = ChangePasswordSchema()


def _cookie_options(max_age=None) -> dict:
    options = {
        "httponly": True,
        "secure": current_app.config.get("COOKIE_SECURE", False),
        "samesite": "Strict",
        "path": "/",
    }
    if max_age is not None:
        options["max_age"] = int(max_age.total_seconds())
    return options


def api_response(message: str, data=None, status: int = 200):
    return jsonify({"success": True, "status": status, "message": message, "data": data}), status


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
          required: [username, email, fullName, password]
          properties:
            username: { type: string }
            email: { type: string }
            fullName: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Missing fields
      409:
        description: User already exists
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)

    user = credentials.register(
        username=data["username"],
        email=data["email"],
        full_name=data["full_name"],
        password=data["password"],
    )
    return api_response("User registered successfully", user_out_schema.dump(user), 201)


@bp.post("/login")
def login():
    """
    Login: returns the user, access_token and refresh_token
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
             usernameOrEmail: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens, sets cookies)
      400:
        description: Missing fields
      401:
        description: Invalid password
      404:
        description: User not found
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)

    user = credentials.verify(data["identifier"], data["password"])
    pair = component("token_service").issue_pair(user.id)
    session = component("session_tracker").begin(
        user.id, request.headers.get("User-Agent"), request.remote_addr
    )
    logger.info("User %s logged in", user.username)

    body, status = api_response(
        "User logged in successfully",
        {
            "user": user_out_schema.dump(user),
            "accessToken": pair.access_token,
            "refreshToken": pair.refresh_token,
            "session": session.to_dict(),
        },
    )
    config = current_app.config
    body.set_cookie("accessToken", pair.access_token, **_cookie_options(config["ACCESS_TOKEN_EXPIRES"]))
    body.set_cookie("refreshToken", pair.refresh_token, **_cookie_options(config["REFRESH_TOKEN_EXPIRES"]))
    session_cookie = _cookie_options(config["SESSION_MAX_AGE"])
    session_cookie["httponly"] = False
    body.set_cookie("sessionData", session.to_cookie(), **session_cookie)
    return body, status


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: forgets the refresh token and clears session cookies
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    user = g.current_user
    component("token_service").revoke(user)
    logger.info("User %s logged out", user.username)

    body, status = api_response(
        "User logged out successfully",
        {
            "message": "Session terminated successfully",
            "logoutTime": utcnow().isoformat(),
            "userId": user.id,
        },
    )
    options = _cookie_options()
    body.delete_cookie("accessToken", path=options["path"], secure=options["secure"],
                       httponly=True, samesite=options["samesite"])
    body.delete_cookie("refreshToken", path=options["path"], secure=options["secure"],
                       httponly=True, samesite=options["samesite"])
    body.delete_cookie("sessionData", path=options["path"], secure=options["secure"],
                       httponly=False, samesite=options["samesite"])
    return body, status


@bp.post("/refresh-token")
@session_validated()
def refresh_token():
    """
    Mint a new access token from the refresh token (cookie or bearer)
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: New access token
      401:
        description: Missing, invalid or superseded refresh token
    """
    token = request.cookies.get("refreshToken") or bearer_token()
    if not token:
        raise Unauthorized("Refresh token is required")
    access_token = component("token_service").rotate(token)

    body, status = api_response("Access token refreshed successfully", {"accessToken": access_token})
    body.set_cookie("accessToken", access_token,
                    **_cookie_options(current_app.config["ACCESS_TOKEN_EXPIRES"]))
    return body, status


@bp.post("/change-password")
@jwt_required()
@rate_limited()
def change_password():
    """
    Change the caller's password
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             currentPassword: { type: string }
             newPassword: { type: string }
    responses:
      200:
        description: Password changed
      400:
        description: Missing fields
      401:
        description: Current password is incorrect
      429:
        description: Too many requests
    """
    payload = request.get_json(silent=True) or {}
    data = change_password_schema.load(payload)
    credentials.change_password(g.current_user, data["current_password"], data["new_password"])
    return api_response("Password changed successfully")

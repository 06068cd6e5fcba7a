from __future__ import annotations

from flask import Blueprint, request, g

from models.base_model import as_utc
from models.schemas.user import UserOutSchema, UserUpdateSchema
from utils import credentials
from utils.decorators import jwt_required
from utils.security import utcnow

from .auth import api_response

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()
user_update_schema = UserUpdateSchema()


@bp.get("/current-user")
@jwt_required()
def current_user():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return api_response("Current user fetched successfully", user_out_schema.dump(g.current_user))


@bp.put("/update-account-details")
@jwt_required()
def update_account_details():
    """
    Update full name and email of the current user.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             fullName: { type: string }
             email: { type: string }
    responses:
      200: { description: OK }
      400: { description: Missing fields }
      409: { description: Email already in use }
    """
    payload = request.get_json(silent=True) or {}
    data = user_update_schema.load(payload)
    user = credentials.update_account(g.current_user, data["full_name"], data["email"])
    return api_response("Account details updated successfully", user_out_schema.dump(user))


@bp.get("/analytics")
@jwt_required()
def analytics():
    """
    Personal analytics for the current user.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    user = g.current_user
    now = utcnow()
    created = as_utc(user.created_at) or now
    profile = user_out_schema.dump(user)
    profile["accountAge"] = round((now - created).total_seconds() / 86400, 4)
    profile["lastLogin"] = profile.get("updatedAt")

    return api_response(
        "User analytics retrieved successfully",
        {
            "message": "Personal analytics dashboard",
            "userInsights": {
                "profile": profile,
                "securityMetrics": {
                    "activeSession": g.session_info.session_id is not None,
                    "lastKnownIP": request.remote_addr or "127.0.0.1",
                    "userAgent": g.session_info.user_agent,
                },
            },
            "privacyLevel": "PERSONAL",
            "generatedAt": now.isoformat(),
        },
    )

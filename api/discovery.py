"""
Discovery blueprint (mounted under /api/v1/users):
- GET /admin-panel          stage 1, any authenticated user
- GET /system/diagnostics   stage 2, needs ?maintenanceCode=
- GET /secret-key           stage 3, needs ?accessCode=
- GET /vault-access         outside the ladder, authentication only
"""
from __future__ import annotations

import platform
import sys
import time

from flask import Blueprint, request, g, current_app

from models import storage
from models.user import User
from utils.decorators import component, jwt_required, rate_limited, session_validated
from utils.security import utcnow

from .auth import api_response

bp = Blueprint("discovery", __name__)

_STARTED = time.monotonic()

DISCOVERY_PATH = [
    "1. Investigated admin panel system logs",
    "2. Found hidden diagnostics endpoint",
    "3. Used maintenance code to access diagnostics",
    "4. Discovered dynamic access pattern",
    "5. Successfully accessed secret key",
]


def _configured(key: str) -> str:
    return "***CONFIGURED***" if current_app.config.get(key) else "NOT SET"


@bp.get("/admin-panel")
@jwt_required()
@session_validated()
@rate_limited()
def admin_panel():
    """
    Admin panel overview.
    ---
    tags:
      - Discovery
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
      429: { description: Too many requests }
    """
    user = g.current_user
    data = {
        "message": "Welcome to the Admin Panel",
        "serverInfo": {
            "pythonVersion": platform.python_version(),
            "platform": sys.platform,
            "uptime": round(time.monotonic() - _STARTED, 3),
        },
        "databaseStats": {
            "connectionStatus": "Connected",
            "totalUsers": storage.count(User),
            "activeUsers": storage.count(User, User.refresh_token.isnot(None)),
        },
        "systemSecrets": {
            "jwtSecret": _configured("ACCESS_TOKEN_SECRET"),
            "dbConnection": _configured("DATABASE_URL"),
            "encryptionKey": _configured("ENCRYPTION_KEY"),
        },
        "accessLevel": "ADMIN",
        "user": {"id": user.id, "username": user.username, "role": "authenticated_user"},
        "systemLogs": component("discovery_gate").admin_clue(),
        "timestamp": utcnow().isoformat(),
    }
    return api_response("Admin panel data retrieved successfully", data)


@bp.get("/system/diagnostics")
@jwt_required()
@session_validated()
@rate_limited()
def system_diagnostics():
    """
    System diagnostics, unlocked by the maintenance code.
    ---
    tags:
      - Discovery
    security:
      - Bearer: []
    parameters:
      - in: query
        name: maintenanceCode
        type: string
        required: true
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
      403: { description: Invalid maintenance code }
    """
    user = g.current_user
    pattern = component("discovery_gate").unlock_diagnostics(
        request.args.get("maintenanceCode"), user.username, user.id
    )
    data = {
        "message": "System diagnostics accessed successfully",
        "systemHealth": {"cpu": "Normal", "memory": "Optimal", "disk": "Good", "network": "Stable"},
        "securityStatus": {"firewall": "Active", "encryption": "AES-256", "lastScan": "2024-01-20T14:22:00Z"},
        "internalNotes": {
            "reminder": "Secret vault requires special access pattern",
            "pattern": pattern,
            "instruction": "Use this pattern as 'accessCode' parameter in vault endpoint",
        },
        "timestamp": utcnow().isoformat(),
    }
    return api_response("Diagnostics retrieved successfully", data)


@bp.get("/secret-key")
@jwt_required()
@session_validated()
@rate_limited()
def secret_key():
    """
    Final stage: reveals the secret for a valid access code.
    ---
    tags:
      - Discovery
    security:
      - Bearer: []
    parameters:
      - in: query
        name: accessCode
        type: string
        required: true
    responses:
      200: { description: Secret revealed }
      400: { description: Access code required }
      403: { description: Access code incorrect or expired }
    """
    user = g.current_user
    secret = component("discovery_gate").reveal_secret(
        request.args.get("accessCode"), user.username, user.id
    )
    data = {
        "message": "Congratulations! You've successfully navigated the discovery process!",
        "secretKey": secret,
        "achievement": "Master Investigator",
        "discoveryPath": DISCOVERY_PATH,
        "user": {"id": user.id, "username": user.username, "email": user.email},
        "unlockedAt": utcnow().isoformat(),
        "specialMessage": "Your investigative skills have proven worthy of this secret!",
    }
    return api_response("Secret key unlocked through discovery!", data)


@bp.get("/vault-access")
@jwt_required()
@session_validated()
@rate_limited()
def vault_access():
    """
    Vault contents (placeholders), authentication only.
    ---
    tags:
      - Discovery
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    user = g.current_user
    config = current_app.config
    data = {
        "message": "Access granted to secure vault",
        "vaultContents": {
            "apiKeys": {
                "stripe": "sk_test_***REDACTED***",
                "sendgrid": "SG.***REDACTED***",
                "aws": "AKIA***REDACTED***",
            },
            "databaseCredentials": {
                "host": "***PROTECTED***",
                "username": "***PROTECTED***",
                "password": "***PROTECTED***",
            },
            "encryptionKeys": {
                "aes256": config["ENCRYPTION_KEY"],
                "hmac": config["HMAC_SECRET"],
            },
        },
        "securityLevel": "MAXIMUM",
        "accessGrantedTo": {
            "userId": user.id,
            "username": user.username,
            "email": user.email,
            "loginTime": utcnow().isoformat(),
        },
        "vaultVersion": "2.1.0",
    }
    return api_response("Vault access granted successfully", data)

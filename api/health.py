from flask import Blueprint, current_app

from utils.security import utcnow

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            status:
              type: string
              example: OK
            timestamp:
              type: string
    """
    return {"status": "OK", "message": "Server is running", "timestamp": utcnow().isoformat()}, 200


@bp.get("/api/health")
def api_health():
    """
    Detailed health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
    """
    return {
        "status": "OK",
        "message": "Authentication Discovery System is running",
        "timestamp": utcnow().isoformat(),
        "environment": current_app.config.get("APP_ENV", "dev"),
    }, 200


@bp.get("/api/v1/users/health")
def users_health():
    return {"status": "OK", "message": "User routes are working", "timestamp": utcnow().isoformat()}, 200

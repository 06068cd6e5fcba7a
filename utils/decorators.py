from __future__ import annotations
import logging
from functools import wraps
from flask import request, g, current_app, after_this_request
from models import storage
from models.user import User
from utils.exceptions import RateLimited, Unauthorized

logger = logging.getLogger(__name__)


def component(name: str):
    """Look up a core component registered on the app by create_app()."""
    return current_app.extensions[name]


def bearer_token() -> str | None:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def jwt_required():
    """
    Resolve the caller from the accessToken cookie or a bearer header and
    attach user, claims and the request's session tracking record to g.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = request.cookies.get("accessToken") or bearer_token()
            if not token:
                raise Unauthorized("Unauthorized request")
            claims = component("token_service").verify_access(token)

            user = storage.get(User, claims.get("sub"))
            if not user:
                raise Unauthorized("Invalid access token")
            g.current_user = user
            g.token_claims = claims

            session_id = None
            raw = request.cookies.get("sessionData")
            if raw:
                try:
                    session_id = component("session_tracker").parse(raw).session_id
                except Unauthorized:
                    # validation is left to session_validated()
                    session_id = None
            g.session_info = component("session_tracker").track(
                session_id=session_id,
                user_agent=request.headers.get("User-Agent"),
                ip_address=request.remote_addr,
                path=request.path,
                method=request.method,
                username=user.username,
            )
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def session_validated():
    """
    Reject requests whose sessionData cookie is malformed or older than
    the session ceiling. Requests without the cookie (bearer clients) pass.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            raw = request.cookies.get("sessionData")
            g.session_data = None
            if raw:
                tracker = component("session_tracker")
                g.session_data = tracker.validate(tracker.parse(raw))
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def rate_limited():
    """
    Count the request against the caller's fixed window and publish the
    remaining quota in X-RateLimit-* headers.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "current_user", None)
            identity = user.id if user is not None else request.remote_addr
            decision = component("rate_limiter").admit(identity)

            @after_this_request
            def add_headers(response):
                response.headers["X-RateLimit-Limit"] = str(decision.limit)
                response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
                response.headers["X-RateLimit-Reset"] = decision.reset_at.isoformat()
                return response

            if not decision.allowed:
                logger.warning("Rate limit exceeded for %s on %s", identity, request.path)
                raise RateLimited(decision.retry_after)
            return fn(*args, **kwargs)

        return wrapper

    return decorator

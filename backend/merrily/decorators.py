# Overview: Request authentication and authority decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .platform import PlatformError
from .services import auth_service, user_service


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user') and g.current_user is not None


def require_auth(f):
    """
    Require a platform-issued access token.

    Sets the following Flask g attributes:
    - g.current_user: AuthUser resolved by the platform
    - g.access_token: the raw token (for caller-scoped platform calls)
    - g.profile: the local UserProfile mirror (created on first sight)

    Returns 401 if:
    - No bearer header and no session cookie
    - The platform rejects the token
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = auth_service.extract_access_token(request)
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        try:
            user = auth_service.fetch_user(token)
        except PlatformError:
            current_app.logger.exception("Failed to verify access token")
            return jsonify({"error": "Authentication service unavailable"}), 502

        if user is None:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = user
        g.access_token = token
        g.profile = user_service.ensure_profile(user)

        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """
    Require admin authority (auth metadata or profile flag).

    Must be stacked under @require_auth.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return jsonify({"error": "Authentication required"}), 401

        if not auth_service.is_admin(g.current_user, getattr(g, "profile", None)):
            current_app.logger.warning(
                "Admin access denied user=%s path=%s", g.current_user.id, request.path
            )
            return jsonify({"error": "Admin access required"}), 403

        return f(*args, **kwargs)

    return decorated_function

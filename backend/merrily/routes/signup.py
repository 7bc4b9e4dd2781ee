# Overview: Flask API route for self-service member registration.

from flask import Blueprint, request, jsonify, current_app

from ..services import signup_service
from ..services.signup_service import SignupError
from ..platform import PlatformError
from ..validation import ValidationError

signup_bp = Blueprint("signup", __name__, url_prefix="/api/signup")


@signup_bp.post("")
def signup_route():
    data = request.get_json(silent=True)
    try:
        result = signup_service.sign_up(data)
    except (ValidationError, SignupError) as e:
        return jsonify({"error": str(e)}), 400
    except PlatformError as e:
        current_app.logger.exception("Sign-up failed")
        return jsonify({"error": str(e)}), e.status_code or 502
    except Exception:
        current_app.logger.exception("Sign-up failed")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result)

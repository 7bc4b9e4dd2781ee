# Overview: Flask API routes for staff attendance; parses input and returns JSON responses.

# backend/merrily/routes/attendance.py
"""
Attendance routes.

Staff clock themselves in and out (auth). The admin screen lists, creates,
edits and deletes records directly.
"""
from flask import Blueprint, request, jsonify, current_app, g

from ..services import attendance_service
from ..validation import ValidationError, ConflictError, NotFoundError, truthy_arg
from ..decorators import require_auth

attendance_bp = Blueprint("attendance", __name__, url_prefix="/api/attendance")


def _caller_staff_name() -> str:
    if g.profile is not None and g.profile.display_name:
        return g.profile.display_name
    email = g.current_user.email or ""
    return email.split("@", 1)[0] or "staff"


@attendance_bp.get("")
def list_attendance_route():
    records = attendance_service.list_records(
        staff_name=request.args.get("staff_name") or None,
        user_id=request.args.get("user_id") or None,
        open_only=truthy_arg(request.args.get("open_only")),
        limit=request.args.get("limit", type=int),
    )
    return jsonify([r.to_dict() for r in records])


@attendance_bp.post("")
@require_auth
def create_attendance_route():
    payload = request.get_json(silent=True) or {}
    try:
        record = attendance_service.create_record(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create attendance record")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(record.to_dict()), 201


@attendance_bp.post("/clock-in")
@require_auth
def clock_in_route():
    data = request.get_json(silent=True) or {}
    staff_name = (data.get("staff_name") or "").strip() or _caller_staff_name()
    try:
        record = attendance_service.clock_in(
            user_id=g.current_user.id,
            staff_name=staff_name,
            note=data.get("note") or None,
        )
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to clock in user=%s", g.current_user.id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(record.to_dict()), 201


@attendance_bp.post("/clock-out")
@require_auth
def clock_out_route():
    """Closes the caller's open record, or staff_name's when given."""
    data = request.get_json(silent=True) or {}
    staff_name = (data.get("staff_name") or "").strip() or None
    try:
        record = attendance_service.clock_out(
            user_id=None if staff_name else g.current_user.id,
            staff_name=staff_name,
            note=data.get("note") or None,
        )
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to clock out user=%s", g.current_user.id)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(record.to_dict())


@attendance_bp.get("/current")
@require_auth
def current_attendance_route():
    record = attendance_service.current_record(g.current_user.id)
    return jsonify({"record": record.to_dict() if record else None})


@attendance_bp.patch("/<int:record_id>")
@require_auth
def update_attendance_route(record_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        record = attendance_service.update_record(record_id, payload)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(record.to_dict())


@attendance_bp.delete("/<int:record_id>")
@require_auth
def delete_attendance_route(record_id: int):
    try:
        attendance_service.delete_record(record_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"ok": True})

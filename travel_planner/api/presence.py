from flask import current_app, jsonify
from flask_login import current_user

from travel_planner.api import api_bp, server_error
from travel_planner.repositories.profiles import set_online_status
from travel_planner.sockets import broadcast_presence
from travel_planner.utils.db_errors import is_connect_timeout_error


@api_bp.route("/user/heartbeat", methods=["POST"])
def heartbeat():
    if not current_user.is_authenticated:
        return jsonify({"ok": False, "error": "User not authenticated"}), 401
    user_id = current_user.id
    try:
        set_online_status(user_id, True)
    except Exception as exc:
        if is_connect_timeout_error(exc):
            # the client polls again shortly; a skipped beat is not an error
            current_app.logger.warning("Heartbeat skipped for %s: database connect timeout", user_id)
            return jsonify({"ok": False, "skipped": True, "reason": "timeout"}), 202
        return server_error("Heartbeat update failed.", "Failed to update heartbeat")
    return jsonify({"ok": True})


@api_bp.route("/user/offline", methods=["POST"])
def offline():
    if not current_user.is_authenticated:
        return jsonify({"ok": False, "error": "Not authenticated"}), 401
    user_id = current_user.id
    try:
        set_online_status(user_id, False)
    except Exception:
        return server_error("Offline update failed.", "Failed to update presence")
    broadcast_presence(user_id, False)
    return jsonify({"ok": True})


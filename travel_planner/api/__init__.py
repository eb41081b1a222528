from flask import Blueprint, current_app, jsonify

from travel_planner.errors import DomainError

api_bp = Blueprint("api", __name__, url_prefix="/api")


def error_response(message: str, status: int):
    return jsonify({"error": message}), status


def not_authenticated():
    return error_response("Not authenticated", 401)


def domain_error_response(exc: DomainError):
    return error_response(str(exc), exc.status_code)


def server_error(log_message: str, message: str):
    current_app.logger.exception(log_message)
    return error_response(message, 500)


from . import auth, avatars, friends, groups, locations, presence, profiles  # noqa: E402,F401

from flask import jsonify, request
from flask_login import current_user, login_required

from travel_planner.api import api_bp, error_response, server_error
from travel_planner.repositories.users import update_avatar_url
from travel_planner.utils.storage import FileTooLarge, list_avatar_library, remove_file, save_avatar_data_url

UPLOADED_AVATAR_PREFIX = "/media/avatars/"


@api_bp.route("/avatars", methods=["GET"])
def list_avatars():
    try:
        return jsonify(list_avatar_library())
    except OSError:
        return server_error("Avatar library listing failed.", "Unable to list avatars")


@api_bp.route("/user/avatar", methods=["POST"])
@login_required
def upload_avatar():
    body = request.get_json(silent=True) or {}
    data_url = body.get("dataUrl")
    if not data_url or not isinstance(data_url, str):
        return error_response("Missing dataUrl", 400)

    try:
        filename = save_avatar_data_url(data_url)
    except FileTooLarge as exc:
        return error_response(str(exc), 413)
    except ValueError as exc:
        return error_response(str(exc), 400)
    except OSError:
        return server_error("Avatar upload failed.", "Upload failed")

    previous = current_user.avatar_url or ""
    update_avatar_url(current_user, f"{UPLOADED_AVATAR_PREFIX}{filename}")
    if previous.startswith(UPLOADED_AVATAR_PREFIX):
        remove_file("avatars", previous[len(UPLOADED_AVATAR_PREFIX):])
    return jsonify({"avatarUrl": current_user.avatar_url})


@api_bp.route("/user/avatar/default", methods=["POST"])
@login_required
def choose_default_avatar():
    body = request.get_json(silent=True) or {}
    avatar_path = body.get("path")
    if not avatar_path or not isinstance(avatar_path, str):
        return error_response("Missing avatar path", 400)
    if not avatar_path.startswith("/avatars/") or ".." in avatar_path:
        return error_response("Invalid avatar path", 400)
    try:
        update_avatar_url(current_user, avatar_path)
    except Exception:
        return server_error("Setting default avatar failed.", "Failed to set avatar")
    return jsonify({"avatarUrl": avatar_path})

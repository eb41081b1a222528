import os

from flask import Blueprint, abort, current_app, send_from_directory

media_bp = Blueprint("media", __name__)


@media_bp.route("/media/<category>/<path:filename>")
def media(category: str, filename: str):
    safe_categories = {"avatars"}
    if category not in safe_categories:
        abort(404)
    directory = current_app.config["UPLOAD_FOLDER"]
    return send_from_directory(os.path.join(directory, category), filename)


@media_bp.route("/avatars/<path:filename>")
def avatar_library(filename: str):
    return send_from_directory(current_app.config["AVATAR_LIBRARY_FOLDER"], filename)

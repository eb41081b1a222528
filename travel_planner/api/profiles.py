import re

from flask import jsonify, request
from flask_login import current_user, login_required

from travel_planner.api import api_bp, error_response, server_error
from travel_planner.repositories.add_friend_logs import log_add_friend
from travel_planner.repositories.users import (
    SEARCH_DEFAULT_LIMIT,
    find_friends_by_partial_name,
    find_friends_by_partial_public_id,
    find_profiles_by_name,
    get_profile_by_public_id,
)
from travel_planner.utils.public_id import is_public_id

DIGITS_ONLY = re.compile(r"^\d+$")
MIN_SEARCH_LENGTH = 2


@api_bp.route("/profiles/search", methods=["GET"])
def search_profiles():
    query = (request.args.get("q") or "").strip()
    if not query:
        return error_response("missing query", 400)
    try:
        profiles = find_profiles_by_name(query)
    except Exception:
        return server_error("Profile search failed.", "server error")
    return jsonify({"data": [profile.to_public_dict() for profile in profiles]})


@api_bp.route("/profiles/search-list", methods=["GET"])
@login_required
def search_profiles_list():
    query = (request.args.get("q") or "").strip()
    if len(query) < MIN_SEARCH_LENGTH:
        return jsonify({"data": []})
    take = request.args.get("limit") or SEARCH_DEFAULT_LIMIT

    try:
        log_add_friend(current_user.id, query)
        if DIGITS_ONLY.match(query):
            profiles = find_friends_by_partial_public_id(query, take)
        else:
            profiles = find_friends_by_partial_name(query, take)
    except Exception:
        return server_error("Profile search-list failed.", "server error")
    return jsonify({"data": [profile.to_search_dict() for profile in profiles]})


@api_bp.route("/u/<slug>", methods=["GET"])
def profile_by_slug(slug: str):
    if is_public_id(slug):
        try:
            profile = get_profile_by_public_id(slug)
        except Exception:
            return server_error("Profile lookup by public id failed.", "Server error")
        if not profile:
            return error_response("Not found", 404)
        return jsonify({"profile": profile.to_public_dict()})

    # username slugs were retired in favour of public ids
    return error_response("Slug route removed", 410)

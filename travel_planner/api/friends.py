import re

from flask import jsonify, request
from flask_login import current_user, login_required

from travel_planner.api import api_bp, domain_error_response, error_response, not_authenticated, server_error
from travel_planner.errors import DomainError
from travel_planner.repositories import friend_invites
from travel_planner.repositories.users import get_profile_by_public_id, get_user, resolve_user_reference
from travel_planner.sockets import notify_friend_update
from travel_planner.utils.public_id import is_public_id

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE
)

INVITE_ACTIONS = {
    "accept": (friend_invites.accept_invite, "request_accepted", "Failed to accept invite"),
    "cancel": (friend_invites.cancel_invite, "request_cancelled", "Failed to cancel invite"),
    "reject": (friend_invites.reject_invite, "request_rejected", "Failed to reject invite"),
}


@api_bp.route("/friend-invites", methods=["GET"])
def list_friend_invites():
    public_id = request.args.get("publicId")
    try:
        if public_id is not None:
            # recipients behind a tunnel poll by public id when cookies are unavailable
            if not is_public_id(public_id):
                return error_response("Invalid publicId", 400)
            profile = get_profile_by_public_id(public_id)
            if not profile:
                return error_response("Profile not found", 404)
            return jsonify(friend_invites.fetch_pending_invites_for_user(profile.id))

        if not current_user.is_authenticated:
            return not_authenticated()
        return jsonify(friend_invites.fetch_pending_invites_both_sides(current_user.id))
    except Exception:
        return server_error("Failed to fetch friend invites.", "Failed to fetch invites")


@api_bp.route("/friend-invites", methods=["POST"])
@login_required
def create_friend_invite():
    body = request.get_json(silent=True) or {}
    to_user_ref = body.get("toUserId")
    if not to_user_ref:
        return error_response("Missing toUserId", 400)

    try:
        target = resolve_user_reference(to_user_ref)
        invite = friend_invites.create_invite(current_user.id, target.id)
    except DomainError as exc:
        return domain_error_response(exc)
    except Exception:
        return server_error("Failed to create friend invite.", "Failed to create invite")

    notify_friend_update(
        target.id,
        "request_received",
        invite_id=invite.id,
        from_user_id=current_user.id,
    )
    return jsonify(invite.to_dict())


@api_bp.route("/friend-invites/<invite_id>/<action>", methods=["POST"])
def respond_to_friend_invite(invite_id: str, action: str):
    if action not in INVITE_ACTIONS:
        return error_response("Unsupported action", 404)
    if not current_user.is_authenticated:
        return not_authenticated()
    invite_id = (invite_id or "").strip()
    if not invite_id:
        return error_response("Missing id", 400)

    handler, event, failure_message = INVITE_ACTIONS[action]
    user_id = current_user.id
    try:
        result = handler(invite_id, user_id)
    except DomainError as exc:
        return domain_error_response(exc)
    except Exception:
        return server_error(f"Friend invite {action} failed.", failure_message)

    invite = friend_invites.get_invite(invite_id)
    if invite is not None:
        other_party = invite.from_user_id if invite.to_user_id == user_id else invite.to_user_id
        notify_friend_update(other_party, event, invite_id=invite.id, from_user_id=user_id)
    return jsonify(result)


@api_bp.route("/friends", methods=["GET"])
@login_required
def list_friends():
    return jsonify(friend_invites.list_friends(current_user.id))


@api_bp.route("/friends/<friend_id>/remove", methods=["DELETE"])
@login_required
def remove_friend(friend_id: str):
    target_id = (friend_id or "").strip()
    if not target_id:
        return error_response("Missing id", 400)
    if not UUID_PATTERN.match(target_id):
        return error_response("Invalid id", 400)
    if target_id == current_user.id:
        return error_response("Cannot unfriend yourself", 400)
    if get_user(target_id) is None:
        return error_response("Target user not found", 404)

    user_id = current_user.id
    try:
        removed = friend_invites.remove_friend(user_id, target_id)
    except Exception:
        return server_error("Unfriend failed.", "Failed to remove friend")
    if not removed:
        return error_response("Friend relation not found", 404)
    notify_friend_update(target_id, "friend_removed", from_user_id=user_id)
    return jsonify({"ok": True, "removed": removed})

from flask import jsonify, request
from flask_login import current_user, login_required

from travel_planner.api import api_bp, domain_error_response, error_response, server_error
from travel_planner.errors import DomainError
from travel_planner.repositories import groups
from travel_planner.repositories.users import resolve_user_reference
from travel_planner.sockets import notify_group_update


@api_bp.route("/groups", methods=["POST"])
@login_required
def create_group():
    body = request.get_json(silent=True) or {}
    name = (body.get("name") or "").strip()
    if not name:
        return error_response("Group name is required", 400)
    if len(name) > 120:
        return error_response("Group name too long", 422)
    try:
        group = groups.create_group(name, current_user.id, description=body.get("description"))
    except Exception:
        return server_error("Failed to create group.", "Failed to create group")
    return jsonify(group.to_dict()), 201


@api_bp.route("/groups/list", methods=["GET"])
def list_groups():
    if not current_user.is_authenticated:
        return jsonify([])
    try:
        return jsonify(groups.list_user_groups(current_user.id))
    except Exception:
        return server_error("Groups list failed.", "Failed to fetch groups")


@api_bp.route("/groups/<group_key>/members", methods=["GET"])
@login_required
def list_group_members(group_key: str):
    try:
        return jsonify(groups.list_group_members(group_key, current_user.id))
    except DomainError as exc:
        return domain_error_response(exc)
    except Exception:
        return server_error("Group members list failed.", "Failed to fetch members")


@api_bp.route("/groups/<group_key>/leave", methods=["POST"])
@login_required
def leave_group(group_key: str):
    try:
        groups.leave_group(group_key, current_user.id)
    except DomainError as exc:
        return domain_error_response(exc)
    except Exception:
        return server_error("Leaving group failed.", "Failed to leave group")
    return jsonify({"success": True})


@api_bp.route("/groups/<group_key>/members/remove", methods=["POST"])
@login_required
def remove_group_member(group_key: str):
    body = request.get_json(silent=True) or {}
    target_user_id = body.get("userId")
    if not target_user_id:
        return error_response("Missing userId", 400)
    try:
        removed = groups.remove_group_member(group_key, current_user.id, str(target_user_id))
    except DomainError as exc:
        return domain_error_response(exc)
    except Exception:
        return server_error("Removing group member failed.", "Failed to remove member")
    if removed:
        notify_group_update(str(target_user_id), "member_removed", group_key=group_key)
    return jsonify({"success": True})


@api_bp.route("/groups/<group_key>/members/invite", methods=["POST"])
@login_required
def invite_group_member(group_key: str):
    body = request.get_json(silent=True) or {}
    to_user_ref = body.get("toUserId") or body.get("publicId")
    if not to_user_ref:
        return error_response("Missing toUserId", 400)
    try:
        invitee = resolve_user_reference(to_user_ref)
        invite = groups.invite_to_group(group_key, current_user.id, invitee.id)
    except DomainError as exc:
        return domain_error_response(exc)
    except Exception:
        return server_error("Failed to invite group member.", "Failed to send invite")
    notify_group_update(invitee.id, "invite_received", invite_id=invite.id, group_id=invite.group_id)
    return jsonify({"id": invite.id, "groupId": invite.group_id, "toUserId": invite.to_user_id}), 201


@api_bp.route("/groups/invites", methods=["GET"])
def list_group_invites():
    if not current_user.is_authenticated:
        return jsonify([])
    try:
        return jsonify(groups.list_pending_group_invites(current_user.id))
    except Exception:
        return server_error("Group invites list failed.", "Failed to fetch group invites")


@api_bp.route("/groups/invites/<invite_id>/accept", methods=["POST"])
@login_required
def accept_group_invite(invite_id: str):
    invite_id = (invite_id or "").strip()
    if not invite_id:
        return error_response("Missing invite id", 400)
    try:
        result = groups.accept_group_invite(invite_id, current_user.id)
    except DomainError as exc:
        return domain_error_response(exc)
    except Exception:
        return server_error("Group invite accept failed.", "Failed to accept invite")
    return jsonify(result)


@api_bp.route("/groups/invites/<invite_id>/reject", methods=["POST"])
@login_required
def reject_group_invite(invite_id: str):
    invite_id = (invite_id or "").strip()
    if not invite_id:
        return error_response("Missing invite id", 400)
    try:
        groups.reject_group_invite(invite_id, current_user.id)
    except Exception:
        return server_error("Group invite reject failed.", "Failed to reject invite")
    return jsonify({"success": True})

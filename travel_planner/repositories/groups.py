import re
import secrets
from typing import Dict, List, Optional

from sqlalchemy import or_

from travel_planner import db
from travel_planner.errors import (
    AlreadyMember,
    CannotInviteSelf,
    Forbidden,
    GroupNotFound,
    InviteAlreadyPending,
    InviteNotFound,
    LastAdmin,
)
from travel_planner.models import Group, GroupInvite, GroupMember, Profile
from travel_planner.models.group import ROLE_ADMIN, ROLE_MEMBER
from travel_planner.utils.datetime import to_utc_iso


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")[:50] or "group"
    return f"{slug}-{secrets.token_hex(3)}"


def create_group(name: str, owner_id: str, description: str = None) -> Group:
    group = Group(name=name, slug=_slugify(name), description=description, created_by=owner_id)
    db.session.add(group)
    db.session.flush()
    db.session.add(GroupMember(group_id=group.id, user_id=owner_id, role=ROLE_ADMIN))
    db.session.commit()
    return group


def find_group(key: str) -> Optional[Group]:
    """Look a group up by id or slug."""
    if not key:
        return None
    return Group.query.filter(or_(Group.id == key, Group.slug == key)).first()


def _require_group(key: str) -> Group:
    group = find_group(key)
    if group is None:
        raise GroupNotFound()
    return group


def invite_to_group(group_key: str, inviter_id: str, invitee_id: str) -> GroupInvite:
    group = _require_group(group_key)
    if not group.is_admin(inviter_id):
        raise Forbidden("Only group admins can invite members.")
    if inviter_id == invitee_id:
        raise CannotInviteSelf()
    if group.has_member(invitee_id):
        raise AlreadyMember()
    existing = GroupInvite.query.filter_by(group_id=group.id, to_user_id=invitee_id).first()
    if existing and existing.status == "pending":
        raise InviteAlreadyPending()
    if existing:
        db.session.delete(existing)
        db.session.flush()
    invite = GroupInvite(group_id=group.id, from_user_id=inviter_id, to_user_id=invitee_id)
    db.session.add(invite)
    db.session.commit()
    return invite


def list_pending_group_invites(user_id: str) -> List[Dict]:
    invites = (
        GroupInvite.query.filter_by(to_user_id=user_id, status="pending")
        .order_by(GroupInvite.created_at.desc())
        .all()
    )
    rows = []
    for invite in invites:
        inviter = invite.inviter
        profile = inviter.profile if inviter else None
        rows.append(
            {
                "id": invite.id,
                "groupId": invite.group_id,
                "groupName": invite.group.name if invite.group else "",
                "fromUserId": invite.from_user_id,
                "fromName": profile.display_name if profile else None,
                "fromAvatarUrl": (inviter.avatar_url if inviter else None) or (profile.avatar_url if profile else None),
                "fromPublicId": profile.public_id if profile else None,
                "createdAt": to_utc_iso(invite.created_at),
            }
        )
    return rows


def accept_group_invite(invite_id: str, user_id: str) -> Dict[str, str]:
    invite = GroupInvite.query.filter_by(id=invite_id, to_user_id=user_id, status="pending").first()
    if invite is None or invite.group is None:
        raise InviteNotFound()
    group = invite.group
    try:
        if not group.has_member(user_id):
            db.session.add(GroupMember(group_id=group.id, user_id=user_id, role=ROLE_MEMBER))
        db.session.delete(invite)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return {"groupId": group.id, "groupName": group.name or ""}


def reject_group_invite(invite_id: str, user_id: str) -> int:
    """Delete the invite if it is addressed to ``user_id``; returns rows removed."""
    removed = GroupInvite.query.filter_by(id=invite_id, to_user_id=user_id).delete(synchronize_session=False)
    db.session.commit()
    return removed


def list_user_groups(user_id: str) -> List[Dict]:
    memberships = (
        GroupMember.query.join(Group, Group.id == GroupMember.group_id)
        .filter(GroupMember.user_id == user_id)
        .order_by(Group.name.asc())
        .all()
    )
    return [{**membership.group.to_dict(), "role": membership.role} for membership in memberships]


def list_group_members(group_key: str, user_id: str) -> List[Dict]:
    """Members of a group, visible to its members only."""
    group = _require_group(group_key)
    if not group.has_member(user_id):
        raise Forbidden()
    rows = (
        db.session.query(GroupMember, Profile)
        .join(Profile, Profile.id == GroupMember.user_id)
        .filter(GroupMember.group_id == group.id)
        .order_by(GroupMember.joined_at.asc())
        .all()
    )
    return [
        {
            "id": member.user_id,
            "username": profile.username,
            "fullName": profile.full_name,
            "avatarUrl": profile.resolved_avatar_url,
            "publicId": profile.public_id,
            "role": member.role,
        }
        for member, profile in rows
    ]


def leave_group(group_key: str, user_id: str) -> int:
    group = _require_group(group_key)
    if group.is_admin(user_id) and group.members.filter_by(role=ROLE_ADMIN).count() <= 1:
        raise LastAdmin()
    removed = GroupMember.query.filter_by(group_id=group.id, user_id=user_id).delete()
    db.session.commit()
    return removed


def remove_group_member(group_key: str, admin_id: str, target_user_id: str) -> int:
    group = _require_group(group_key)
    if not group.is_admin(admin_id):
        raise Forbidden("Only group admins can remove members.")
    if target_user_id == admin_id:
        return leave_group(group.id, admin_id)
    removed = GroupMember.query.filter_by(group_id=group.id, user_id=target_user_id).delete()
    db.session.commit()
    return removed

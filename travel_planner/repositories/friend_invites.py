"""Friend invite lifecycle: pending -> accepted / rejected / cancelled."""
from typing import Dict, List, Optional

from sqlalchemy import and_, or_

from travel_planner import db
from travel_planner.errors import (
    AlreadyFriends,
    CannotInviteSelf,
    Forbidden,
    InviteAlreadyPending,
    InviteNotFound,
    InviteNotPending,
)
from travel_planner.models import FriendInvite, Profile, User, UserFriend
from travel_planner.models.friendship import (
    INVITE_ACCEPTED,
    INVITE_CANCELLED,
    INVITE_PENDING,
    INVITE_REJECTED,
)
from travel_planner.utils.datetime import to_utc_iso, utcnow


def _party_fields(user: Optional[User], prefix: str) -> Dict[str, Optional[str]]:
    profile: Optional[Profile] = user.profile if user else None
    avatar = None
    if user is not None:
        avatar = user.avatar_url or (profile.avatar_url if profile else None)
    return {
        f"{prefix}_name": profile.display_name if profile else (user.username if user else None),
        f"{prefix}_public_id": profile.public_id if profile else None,
        f"{prefix}_avatar_url": avatar,
    }


def serialize_invite(invite: FriendInvite, both_sides: bool = False) -> Dict[str, Optional[str]]:
    payload = {
        "id": invite.id,
        "from_user_id": invite.from_user_id,
        "created_at": to_utc_iso(invite.created_at),
    }
    sender = _party_fields(invite.sender, "from")
    if both_sides:
        payload["to_user_id"] = invite.to_user_id
        payload.update(sender)
        payload.update(_party_fields(invite.recipient, "to"))
    else:
        payload["from_name"] = sender["from_name"]
        payload["from_public_id"] = sender["from_public_id"]
        payload["avatar_url"] = sender["from_avatar_url"]
    return payload


def are_friends(user_id: str, other_user_id: str) -> bool:
    return bool(UserFriend.query.filter_by(user_id=user_id, friend_id=other_user_id).first())


def fetch_pending_invites_for_user(user_id: str) -> List[Dict]:
    invites = (
        FriendInvite.query.filter_by(to_user_id=user_id, status=INVITE_PENDING)
        .order_by(FriendInvite.created_at.desc())
        .all()
    )
    return [serialize_invite(invite) for invite in invites]


def fetch_pending_invites_both_sides(user_id: str) -> List[Dict]:
    """Pending invites where the user is either the recipient or the sender."""
    invites = (
        FriendInvite.query.filter(
            or_(FriendInvite.to_user_id == user_id, FriendInvite.from_user_id == user_id),
            FriendInvite.status == INVITE_PENDING,
        )
        .order_by(FriendInvite.created_at.desc())
        .all()
    )
    return [serialize_invite(invite, both_sides=True) for invite in invites]


def create_invite(from_user_id: str, to_user_id: str) -> FriendInvite:
    if from_user_id == to_user_id:
        raise CannotInviteSelf()
    if are_friends(from_user_id, to_user_id):
        raise AlreadyFriends()
    existing = FriendInvite.query.filter(
        or_(
            and_(FriendInvite.from_user_id == from_user_id, FriendInvite.to_user_id == to_user_id),
            and_(FriendInvite.from_user_id == to_user_id, FriendInvite.to_user_id == from_user_id),
        ),
        FriendInvite.status == INVITE_PENDING,
    ).first()
    if existing:
        raise InviteAlreadyPending()
    invite = FriendInvite(from_user_id=from_user_id, to_user_id=to_user_id)
    db.session.add(invite)
    db.session.commit()
    return invite


def _load_invite(invite_id: str) -> FriendInvite:
    invite = db.session.get(FriendInvite, invite_id)
    if invite is None:
        raise InviteNotFound()
    return invite


def _add_friendship(user_id: str, friend_id: str) -> None:
    if not UserFriend.query.filter_by(user_id=user_id, friend_id=friend_id).first():
        db.session.add(UserFriend(user_id=user_id, friend_id=friend_id))


def accept_invite(invite_id: str, current_user_id: str) -> Dict[str, bool]:
    invite = _load_invite(invite_id)
    if invite.to_user_id != current_user_id:
        raise Forbidden()
    if invite.status != INVITE_PENDING:
        raise InviteNotPending()

    try:
        # conditional on status so a concurrent accept/cancel cannot both win
        updated = FriendInvite.query.filter_by(id=invite.id, status=INVITE_PENDING).update(
            {"status": INVITE_ACCEPTED, "responded_at": utcnow()}
        )
        if not updated:
            raise InviteNotPending()
        _add_friendship(current_user_id, invite.from_user_id)
        _add_friendship(invite.from_user_id, current_user_id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return {"accepted": True}


def reject_invite(invite_id: str, current_user_id: str) -> Dict[str, bool]:
    invite = _load_invite(invite_id)
    if invite.to_user_id != current_user_id:
        raise Forbidden()
    invite.status = INVITE_REJECTED
    invite.responded_at = utcnow()
    db.session.commit()
    return {"rejected": True}


def cancel_invite(invite_id: str, current_user_id: str) -> Dict[str, bool]:
    invite = _load_invite(invite_id)
    if invite.from_user_id != current_user_id:
        raise Forbidden()
    invite.status = INVITE_CANCELLED
    invite.responded_at = utcnow()
    db.session.commit()
    return {"cancelled": True}


def get_invite(invite_id: str) -> Optional[FriendInvite]:
    return db.session.get(FriendInvite, invite_id)


def friend_ids(user_id: str) -> List[str]:
    outgoing = [row.friend_id for row in UserFriend.query.filter_by(user_id=user_id)]
    incoming = [row.user_id for row in UserFriend.query.filter_by(friend_id=user_id)]
    seen = []
    for friend_id in outgoing + incoming:
        if friend_id not in seen:
            seen.append(friend_id)
    return seen


def list_friends(user_id: str) -> List[Dict]:
    ids = friend_ids(user_id)
    if not ids:
        return []
    profiles = Profile.query.filter(Profile.id.in_(ids)).order_by(Profile.username_display).all()
    return [
        {**profile.to_search_dict(), "online": bool(profile.online)}
        for profile in profiles
    ]


def remove_friend(user_id: str, friend_id: str) -> int:
    removed = UserFriend.query.filter(
        or_(
            and_(UserFriend.user_id == user_id, UserFriend.friend_id == friend_id),
            and_(UserFriend.user_id == friend_id, UserFriend.friend_id == user_id),
        )
    ).delete(synchronize_session=False)
    db.session.commit()
    return removed

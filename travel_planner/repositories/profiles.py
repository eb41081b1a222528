from typing import List

from travel_planner import db
from travel_planner.models import Profile
from travel_planner.utils.datetime import seconds_ago, utcnow


def set_online_status(user_id: str, online: bool) -> bool:
    """Update live presence fields for a profile row.

    Returns False when no profile exists for ``user_id``.
    """
    try:
        updated = Profile.query.filter_by(id=user_id).update(
            {"online": bool(online), "last_online_at": utcnow()}
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return bool(updated)


def mark_stale_profiles_offline(timeout_seconds: int) -> List[str]:
    """Flip profiles whose last heartbeat is older than the timeout to offline."""
    cutoff = seconds_ago(timeout_seconds)
    stale = Profile.query.filter(
        Profile.online.is_(True),
        db.or_(Profile.last_online_at.is_(None), Profile.last_online_at < cutoff),
    ).all()
    stale_ids = [profile.id for profile in stale]
    if not stale_ids:
        return []
    Profile.query.filter(Profile.id.in_(stale_ids)).update({"online": False})
    db.session.commit()
    return stale_ids

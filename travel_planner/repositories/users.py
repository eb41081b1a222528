import math
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from travel_planner import db
from travel_planner.errors import AccountConflict, ProfileNotFound, UserNotFound
from travel_planner.models import Profile, User
from travel_planner.utils.public_id import assign_public_id, is_public_id

SEARCH_DEFAULT_LIMIT = 10
SEARCH_MAX_LIMIT = 20


def _like_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def clamp_search_limit(value) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = SEARCH_DEFAULT_LIMIT
    if math.isnan(number) or number == 0:
        number = SEARCH_DEFAULT_LIMIT
    # clamp before int() so infinities land on the bounds
    return int(min(max(number, 1), SEARCH_MAX_LIMIT))


def get_user(user_id: str) -> Optional[User]:
    if not user_id:
        return None
    return db.session.get(User, str(user_id))


def find_user_by_email(email: str) -> Optional[User]:
    return User.query.filter(func.lower(User.email) == (email or "").strip().lower()).first()


def find_user_by_username(username: str) -> Optional[User]:
    return User.query.filter(func.lower(User.username) == (username or "").strip().lower()).first()


def create_user(email: str, username: str, password: str, full_name: Optional[str] = None) -> User:
    """Create the account and its profile row (with a fresh public id) together."""
    username = username.strip()
    if find_user_by_email(email):
        raise AccountConflict("An account with that email already exists.")
    if find_user_by_username(username) or Profile.query.filter(
        func.lower(Profile.username) == username.lower()
    ).first():
        raise AccountConflict("Username already taken.")

    user = User(email=email, username=username)
    user.set_password(password)
    profile = Profile(username=username, username_display=username, full_name=full_name)
    assign_public_id(profile)
    user.profile = profile
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise AccountConflict() from exc
    return user


def get_profile_by_public_id(public_id: str) -> Optional[Profile]:
    if not is_public_id(public_id):
        return None
    return Profile.query.filter_by(public_id=str(public_id)).first()


def resolve_user_reference(reference) -> User:
    """Turn a user id or an 8-digit public id into a user."""
    value = str(reference or "").strip()
    if is_public_id(value):
        profile = get_profile_by_public_id(value)
        if not profile:
            raise ProfileNotFound()
        return profile.user
    user = get_user(value)
    if not user:
        raise UserNotFound()
    return user


def find_profiles_by_name(name: str) -> List[Profile]:
    pattern = f"%{_like_escape(name.lower())}%"
    return (
        Profile.query.filter(
            or_(
                func.lower(Profile.username_display).like(pattern, escape="\\"),
                func.lower(Profile.full_name).like(pattern, escape="\\"),
            )
        )
        .order_by(Profile.username_display)
        .all()
    )


def find_friends_by_partial_public_id(partial_id: str, limit=SEARCH_DEFAULT_LIMIT) -> List[Profile]:
    q = (partial_id or "").strip()
    if not q:
        return []
    return (
        Profile.query.filter(Profile.public_id.like(f"{_like_escape(q)}%", escape="\\"))
        .order_by(Profile.public_id.asc())
        .limit(clamp_search_limit(limit))
        .all()
    )


def find_friends_by_partial_name(partial_name: str, limit=SEARCH_DEFAULT_LIMIT) -> List[Profile]:
    q = (partial_name or "").strip()
    if not q:
        return []
    pattern = f"{_like_escape(q.lower())}%"
    return (
        Profile.query.filter(
            or_(
                func.lower(Profile.username_display).like(pattern, escape="\\"),
                func.lower(Profile.full_name).like(pattern, escape="\\"),
                func.lower(Profile.username).like(pattern, escape="\\"),
            )
        )
        .order_by(Profile.username_display)
        .limit(clamp_search_limit(limit))
        .all()
    )


def update_avatar_url(user: User, avatar_url: Optional[str]) -> User:
    user.avatar_url = avatar_url
    if user.profile:
        user.profile.avatar_url = avatar_url
    db.session.commit()
    return user

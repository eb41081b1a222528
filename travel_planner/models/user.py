import uuid
from datetime import datetime

from flask_login import UserMixin
from sqlalchemy.orm import validates
from werkzeug.security import check_password_hash, generate_password_hash

from travel_planner import db
from travel_planner.utils.datetime import to_utc_iso


def new_uuid() -> str:
    return str(uuid.uuid4())


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    email = db.Column(db.String(255), unique=True, nullable=False)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(512), nullable=False)
    avatar_url = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    profile = db.relationship(
        "Profile",
        uselist=False,
        backref=db.backref("user", uselist=False),
        cascade="all, delete-orphan",
    )

    @validates("email")
    def _normalize_email(self, _, value):
        if value is None:
            return value
        return value.strip().lower()

    def set_password(self, password: str) -> None:
        if not password:
            raise ValueError("Password must not be empty.")
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash or password is None:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def display_name(self):
        if self.profile:
            return self.profile.display_name
        return self.username

    def to_account_dict(self):
        profile = self.profile
        return {
            "id": self.id,
            "email": self.email,
            "username": self.display_name,
            "usernameDisplay": profile.username_display if profile else None,
            "publicId": profile.public_id if profile else None,
            "avatarUrl": self.avatar_url,
            "online": bool(profile.online) if profile else False,
            "createdAt": to_utc_iso(self.created_at),
        }

    def __repr__(self):
        return f"<User {self.username}>"


class Profile(db.Model):
    __tablename__ = "profiles"

    id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    username = db.Column(db.String(64), nullable=False)
    username_display = db.Column(db.String(64), nullable=True)
    full_name = db.Column(db.String(120), nullable=True)
    avatar_url = db.Column(db.String(512), nullable=True)
    bio = db.Column(db.Text, nullable=True)
    public_id = db.Column(db.String(8), unique=True, nullable=False, index=True)
    online = db.Column(db.Boolean, default=False, nullable=False)
    last_online_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def display_name(self):
        return self.username_display or self.full_name or self.username

    @property
    def resolved_avatar_url(self):
        # the account-level avatar wins over the profile copy
        account = self.user
        if account is not None and account.avatar_url:
            return account.avatar_url
        return self.avatar_url

    def to_public_dict(self):
        return {
            "id": self.id,
            "public_id": self.public_id,
            "name": self.display_name,
            "username": self.username,
            "username_display": self.username_display,
            "full_name": self.full_name,
            "avatar_url": self.resolved_avatar_url,
            "bio": self.bio,
            "online": bool(self.online),
        }

    def to_search_dict(self):
        return {
            "id": self.id,
            "public_id": self.public_id,
            "name": self.display_name,
            "avatar_url": self.resolved_avatar_url,
        }

    def __repr__(self):
        return f"<Profile {self.public_id}>"

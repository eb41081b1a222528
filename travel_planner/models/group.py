from datetime import datetime

from travel_planner import db
from travel_planner.models.user import new_uuid

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


class Group(db.Model):
    __tablename__ = "groups"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(140), unique=True, nullable=False)
    avatar_url = db.Column(db.String(512), nullable=True)
    description = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    members = db.relationship("GroupMember", backref="group", cascade="all, delete-orphan", lazy="dynamic")

    def has_member(self, user_id: str) -> bool:
        return self.members.filter_by(user_id=user_id).count() > 0

    def is_admin(self, user_id: str) -> bool:
        return self.members.filter_by(user_id=user_id, role=ROLE_ADMIN).count() > 0

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "avatarUrl": self.avatar_url,
            "description": self.description,
            "memberCount": self.members.count(),
            "createdBy": self.created_by,
        }


class GroupMember(db.Model):
    __tablename__ = "group_members"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    group_id = db.Column(db.String(36), db.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = db.Column(db.String(20), default=ROLE_MEMBER, nullable=False)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint("group_id", "user_id", name="uniq_group_member"),)


class GroupInvite(db.Model):
    __tablename__ = "group_invites"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    group_id = db.Column(db.String(36), db.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    from_user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    to_user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = db.Column(db.String(20), default="pending", nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    inviter = db.relationship("User", foreign_keys=[from_user_id])
    group = db.relationship(
        "Group",
        foreign_keys=[group_id],
        backref=db.backref("invites", cascade="all, delete-orphan"),
    )

    __table_args__ = (
        db.UniqueConstraint("group_id", "to_user_id", name="uniq_group_invite"),
    )

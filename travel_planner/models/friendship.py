from datetime import datetime

from travel_planner import db
from travel_planner.models.user import new_uuid
from travel_planner.utils.datetime import to_utc_iso

INVITE_PENDING = "pending"
INVITE_ACCEPTED = "accepted"
INVITE_REJECTED = "rejected"
INVITE_CANCELLED = "cancelled"


class FriendInvite(db.Model):
    __tablename__ = "friend_invites"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    from_user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    to_user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = db.Column(db.String(20), default=INVITE_PENDING, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    responded_at = db.Column(db.DateTime, nullable=True)

    sender = db.relationship("User", foreign_keys=[from_user_id], backref="sent_friend_invites")
    recipient = db.relationship("User", foreign_keys=[to_user_id], backref="received_friend_invites")

    __table_args__ = (db.Index("ix_friend_invites_to_status", "to_user_id", "status"),)

    def to_dict(self):
        return {
            "id": self.id,
            "from_user_id": self.from_user_id,
            "to_user_id": self.to_user_id,
            "status": self.status,
            "created_at": to_utc_iso(self.created_at),
        }


class UserFriend(db.Model):
    __tablename__ = "user_friends"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    friend_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (db.UniqueConstraint("user_id", "friend_id", name="uniq_user_friend"),)


class AddFriendLog(db.Model):
    __tablename__ = "add_friend_logs"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    search_query = db.Column("query", db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

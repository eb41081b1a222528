from typing import List

from travel_planner import db
from travel_planner.models import AddFriendLog


def log_add_friend(user_id: str, query: str) -> AddFriendLog:
    entry = AddFriendLog(user_id=user_id, search_query=query)
    db.session.add(entry)
    db.session.commit()
    return entry


def list_add_friend_logs(user_id: str) -> List[AddFriendLog]:
    return (
        AddFriendLog.query.filter_by(user_id=user_id)
        .order_by(AddFriendLog.created_at.asc())
        .all()
    )

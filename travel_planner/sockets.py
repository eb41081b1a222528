from typing import Any, Dict

from flask import current_app
from flask_login import current_user
from flask_socketio import join_room

from travel_planner import socketio
from travel_planner.repositories.friend_invites import friend_ids
from travel_planner.repositories.profiles import set_online_status


def user_room(user_id: str) -> str:
    return f"user_{user_id}"


def broadcast_presence(user_id: str, online: bool) -> None:
    payload = {"user_id": user_id, "online": bool(online)}
    for friend_id in friend_ids(user_id):
        socketio.emit("presence:update", payload, room=user_room(friend_id))


def notify_friend_update(user_id: str, action: str, **extra: Any) -> None:
    payload: Dict[str, Any] = {"action": action}
    payload.update(extra)
    socketio.emit("friend:update", payload, room=user_room(user_id))


def notify_group_update(user_id: str, action: str, **extra: Any) -> None:
    payload: Dict[str, Any] = {"action": action}
    payload.update(extra)
    socketio.emit("group:update", payload, room=user_room(user_id))


@socketio.on("initialize")
def handle_initialize():
    if not current_user.is_authenticated:
        return {"ok": False, "error": "Unauthorized"}
    join_room(user_room(current_user.id))
    try:
        set_online_status(current_user.id, True)
    except Exception:
        current_app.logger.exception("Failed to mark user online on initialize.")
    else:
        broadcast_presence(current_user.id, True)
    return {"ok": True, "user": current_user.to_account_dict()}


@socketio.on("disconnect")
def handle_disconnect(*_args):
    if not current_user.is_authenticated:
        return
    try:
        set_online_status(current_user.id, False)
    except Exception:
        current_app.logger.exception("Failed to mark user offline on disconnect.")
        return
    broadcast_presence(current_user.id, False)

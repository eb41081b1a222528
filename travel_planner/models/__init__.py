from .user import User, Profile
from .friendship import FriendInvite, UserFriend, AddFriendLog
from .group import Group, GroupMember, GroupInvite

__all__ = [
    "User",
    "Profile",
    "FriendInvite",
    "UserFriend",
    "AddFriendLog",
    "Group",
    "GroupMember",
    "GroupInvite",
]

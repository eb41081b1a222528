"""Domain errors raised by the repositories and mapped to HTTP answers."""


class DomainError(Exception):
    status_code = 500
    message = "Request failed"

    def __init__(self, message=None):
        super().__init__(message or self.message)


class InviteNotFound(DomainError):
    status_code = 404
    message = "Invite not found"


class Forbidden(DomainError):
    status_code = 403
    message = "Forbidden"


class InviteNotPending(DomainError):
    status_code = 409
    message = "Invite is not pending"


class InviteAlreadyPending(DomainError):
    status_code = 409
    message = "Invite already pending"


class AlreadyFriends(DomainError):
    status_code = 409
    message = "Already friends"


class CannotInviteSelf(DomainError):
    status_code = 400
    message = "Cannot invite yourself"


class ProfileNotFound(DomainError):
    status_code = 404
    message = "Profile not found"


class UserNotFound(DomainError):
    status_code = 404
    message = "Target user not found"


class GroupNotFound(DomainError):
    status_code = 404
    message = "Group not found"


class AlreadyMember(DomainError):
    status_code = 409
    message = "User is already a member"


class AccountConflict(DomainError):
    status_code = 409
    message = "Account already exists"


class LastAdmin(DomainError):
    status_code = 400
    message = "Cannot leave group as the last admin"

"""Domain errors raised by the social graph services.

Services never build HTTP responses: they raise one of these and the
application maps `status_code`/`code` to the JSON error body.
"""

from enum import Enum


class ErrorCode(str, Enum):
    not_found = "not_found"
    not_blocked = "not_blocked"
    self_request = "self_request"
    self_action = "self_action"
    already_friends = "already_friends"
    already_requested = "already_requested"
    already_blocked = "already_blocked"
    friend_limit_exceeded = "friend_limit_exceeded"
    post_not_visible = "post_not_visible"
    feed_not_visible = "feed_not_visible"
    comments_not_allowed = "comments_not_allowed"
    not_author = "not_author"
    already_liked = "already_liked"
    not_liked = "not_liked"
    username_taken = "username_taken"
    invalid_content = "invalid_content"


class SocialError(Exception):
    status_code = 500
    default_code = ErrorCode.not_found

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def __repr__(self):
        return f"{type(self).__name__}({self.code.value}: {self.message})"


class NotFound(SocialError):
    status_code = 404
    default_code = ErrorCode.not_found


class Forbidden(SocialError):
    """A policy denial: visibility, disabled comments, acting on oneself"""

    status_code = 403
    default_code = ErrorCode.post_not_visible


class Conflict(SocialError):
    """A friend-graph precondition does not hold.

    The graph conflicts are reported as 403 with their code, the
    idempotency conflicts on likes and usernames as 409.
    """

    status_code = 403
    default_code = ErrorCode.already_friends

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message, code)
        if self.code in (
            ErrorCode.already_liked,
            ErrorCode.not_liked,
            ErrorCode.username_taken,
        ):
            self.status_code = 409


class InvalidInput(SocialError):
    status_code = 400
    default_code = ErrorCode.invalid_content


# Named variants of the friend-graph state machine


def self_request() -> Forbidden:
    return Forbidden("Cannot send a friend request to yourself", ErrorCode.self_request)


def already_friends() -> Conflict:
    return Conflict("Users are already friends", ErrorCode.already_friends)


def already_requested() -> Conflict:
    return Conflict("A friend request is already pending", ErrorCode.already_requested)


def already_blocked() -> Conflict:
    return Conflict("A block exists between these users", ErrorCode.already_blocked)


def friend_limit_exceeded(limit: int) -> Conflict:
    return Conflict(
        f"Friend limit of {limit} reached", ErrorCode.friend_limit_exceeded
    )


def not_blocked() -> NotFound:
    return NotFound("User is not blocked", ErrorCode.not_blocked)

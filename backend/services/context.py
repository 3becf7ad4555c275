from dataclasses import dataclass

from models.user import User


@dataclass(frozen=True, slots=True)
class Viewer:
    """The authenticated caller of an operation"""

    id: int
    username: str

    @classmethod
    def from_user(cls, user: User) -> "Viewer":
        return cls(id=user.id, username=user.username)

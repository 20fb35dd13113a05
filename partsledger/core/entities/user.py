"""Caller identity supplied by the authentication collaborator."""

from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    """User roles."""

    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"

    @classmethod
    def parse(cls, value: str | None) -> "Role":
        """Map a raw role value to a Role; unknown values fall back to USER."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.USER


class AuthenticatedUser(BaseModel):
    """An authenticated caller."""

    id: str
    role: Role = Role.USER
    name: str | None = None

"""User directory backed by a JSON user file with bcrypt password hashes.

Expected file format:
{
    "users": [
        {"username": "admin", "password": "$2b$12$...", "roles": "ConfigureAdmin;SecurityAdmin"},
        {"username": "operator", "password": "$2b$12$...", "roles": ["Operator"]}
    ]
}

Only the permission gate path consults this directory.  The simulation
engine never does.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import bcrypt
from pydantic import BaseModel, Field, field_validator

from uasim.domain.enums import Role

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when credentials are presented but do not check out."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"user '{username}' rejected")


class UserRecord(BaseModel):
    """One entry of the user file."""

    username: str = Field(..., min_length=1, max_length=256)
    password: str = Field(..., min_length=1, description="bcrypt hash")
    roles: list[Role] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("roles", mode="before")
    @classmethod
    def split_role_string(cls, v: object) -> object:
        # "Operator;Engineer" is accepted as shorthand for a list
        if isinstance(v, str):
            return [r.strip() for r in v.split(";") if r.strip()]
        return v


class UserFile(BaseModel):
    users: list[UserRecord] = Field(default_factory=list)


class UserDirectory:
    """Looks up users and verifies their passwords.

    Usernames that occur more than once are treated as unknown: neither
    entry can log in.
    """

    def __init__(self, users: Iterable[UserRecord] = ()) -> None:
        self._users: list[UserRecord] = list(users)

    @classmethod
    def from_file(cls, path: str | Path) -> "UserDirectory":
        data = UserFile.model_validate_json(Path(path).read_text(encoding="utf-8"))
        logger.info("Loaded %d user(s) from %s", len(data.users), path)
        return cls(data.users)

    def __len__(self) -> int:
        return len(self._users)

    def _get(self, username: str) -> UserRecord | None:
        matches = [u for u in self._users if u.username == username]
        if len(matches) > 1:
            logger.error("Found %d users with the name %s", len(matches), username)
            return None
        return matches[0] if matches else None

    def authenticate(self, username: str, password: str) -> bool:
        """True if *username* exists exactly once and *password* matches."""
        user = self._get(username)
        if user is None:
            logger.warning("User:unknown rejected")
            return False
        try:
            ok = bcrypt.checkpw(password.encode("utf-8"), user.password.encode("utf-8"))
        except ValueError:
            logger.error("User:'%s' has a malformed password hash", username)
            return False
        if ok:
            logger.info("User:'%s' logged in as %s", username, [r.value for r in user.roles])
        else:
            logger.warning("User:'%s' rejected", username)
        return ok

    def roles_for(self, username: str) -> frozenset[Role]:
        """Roles granted to *username*; empty for unknown users."""
        user = self._get(username)
        if user is None:
            return frozenset()
        return frozenset(user.roles) | {Role.AUTHENTICATED_USER}

    def resolve(self, username: str | None, password: str | None) -> frozenset[Role]:
        """Roles for a session: anonymous without credentials.

        Raises:
            AuthenticationError: If credentials are given but invalid.
        """
        if not username:
            return frozenset({Role.ANONYMOUS})
        if not self.authenticate(username, password or ""):
            raise AuthenticationError(username)
        return self.roles_for(username)

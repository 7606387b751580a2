"""Pydantic schemas for users and auth results."""

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

from deepthoughts.schemas.thought import ThoughtRead

_read_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserSummary(BaseModel):
    """A user as it appears inside someone else's friend list."""

    id: str
    username: str
    email: str

    model_config = _read_config


class UserRead(UserSummary):
    """A user with thoughts and friends resolved. Never carries the password."""

    thoughts: list[ThoughtRead] = []
    friends: list[UserSummary] = []

    @computed_field(alias="friendCount")
    @property
    def friend_count(self) -> int:
        return len(self.friends)


class AuthPayload(BaseModel):
    """Result of addUser / login."""

    token: str
    user: UserRead

    model_config = _read_config

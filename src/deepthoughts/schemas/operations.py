"""Variables accepted by each API operation.

Learn: Every operation validates its variables against one of these
models before any business logic runs. A missing required variable
(e.g. thoughtText) fails here and surfaces as BAD_USER_INPUT — it never
reaches the authorization gate or storage.
"""

from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from deepthoughts.config import settings

_variables_config = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
    extra="forbid",
)

# Credentials keep passwords byte-for-byte; only the public fields are trimmed.
_credentials_config = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="forbid",
)

Trimmed = Annotated[str, StringConstraints(strip_whitespace=True)]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class OperationRequest(BaseModel):
    """Body of POST /api/v1/ops/{operation}."""

    variables: dict[str, Any] = Field(default_factory=dict)
    token: Optional[str] = None


class NoVariables(BaseModel):
    model_config = _variables_config


# ─── Queries ────────────────────────────────────────────


class ThoughtsVariables(BaseModel):
    username: Optional[str] = None

    model_config = _variables_config


class ThoughtVariables(BaseModel):
    id: str = Field(..., min_length=1)

    model_config = _variables_config


class UserVariables(BaseModel):
    username: str = Field(..., min_length=1)

    model_config = _variables_config


# ─── Mutations ──────────────────────────────────────────


class AddUserVariables(BaseModel):
    username: Trimmed = Field(..., min_length=1, max_length=50)
    email: Trimmed = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=5)

    model_config = _credentials_config


class LoginVariables(BaseModel):
    email: Trimmed = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    model_config = _credentials_config


class AddThoughtVariables(BaseModel):
    thought_text: str = Field(..., min_length=1, max_length=settings.max_text_length)

    model_config = _variables_config


class AddReactionVariables(BaseModel):
    thought_id: str = Field(..., min_length=1)
    reaction_body: str = Field(..., min_length=1, max_length=settings.max_text_length)

    model_config = _variables_config


class AddFriendVariables(BaseModel):
    friend_id: str = Field(..., min_length=1)

    model_config = _variables_config

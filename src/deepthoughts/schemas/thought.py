"""Pydantic schemas for thoughts and reactions.

Learn: Storage documents use snake_case keys; the API speaks camelCase.
alias_generator=to_camel plus populate_by_name lets one model read a
stored document and dump the wire shape (model_dump(by_alias=True)).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

_read_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReactionRead(BaseModel):
    id: str
    reaction_body: str
    username: str
    created_at: datetime

    model_config = _read_config


class ThoughtRead(BaseModel):
    id: str
    thought_text: str
    username: str
    created_at: datetime
    reactions: list[ReactionRead] = []

    model_config = _read_config

    @computed_field(alias="reactionCount")
    @property
    def reaction_count(self) -> int:
        return len(self.reactions)

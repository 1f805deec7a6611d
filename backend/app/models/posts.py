"""Pydantic models for the upstream posts and comments resources.

Field names follow the upstream JSON (camelCase); unknown upstream
fields are ignored.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Post(_UpstreamModel):
    """A single post as published by the upstream API."""

    user_id: int = 0
    id: int = 0
    title: str = ""
    body: str = ""

    @property
    def is_zero_valued(self) -> bool:
        """True when every field still holds its default (empty upstream body)."""
        return self == Post()


class Comment(_UpstreamModel):
    """A comment attached to a post."""

    id: int = 0
    post_id: int = 0
    name: str = ""
    email: str = ""
    body: str = ""

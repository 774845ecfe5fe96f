"""Story record as served by the Hacker News item endpoint."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Story(BaseModel):
    """One Hacker News item.

    Wire names (``by``, ``type``, ``url``, ``time``) are accepted as aliases;
    fields missing from the payload default to empty/zero. Fields the API
    sends that are not modelled here (``kids``, ``descendants``, ``text``)
    are ignored.

    Attributes:
        id: Item identifier assigned by Hacker News
        author: Username of the submitter
        title: Story title
        kind: Item type tag such as "story", "job" or "poll"
        display_url: External link, or the item page link when there is none
        score: Points at fetch time
        submitted_at: Submission time in unix seconds
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int = Field(default=0, ge=0)
    author: str = Field(default="", alias="by")
    title: str = ""
    kind: str = Field(default="", alias="type")
    display_url: str = Field(default="", alias="url")
    score: int = 0
    submitted_at: int = Field(default=0, alias="time")

    @field_validator("author", "title", "kind", "display_url", mode="before")
    @classmethod
    def null_to_empty(cls, value: Any) -> Any:
        """Deleted or dead items carry explicit nulls."""
        return "" if value is None else value

    @field_validator("score", "submitted_at", mode="before")
    @classmethod
    def null_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

"""Comment data models for ExecuTask."""

from pydantic import Field, field_validator

from executask.models.base import ApiModel, Record
from executask.models.constants import COMMENT_MAX_LENGTH


class Comment(Record):
    todo_id: str
    user_id: str
    content: str


class CommentPayload(ApiModel):
    """Body for creating or editing a comment."""

    content: str = Field(..., min_length=1, max_length=COMMENT_MAX_LENGTH)

    @field_validator("content")
    @classmethod
    def _strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("content must not be blank")
        return v

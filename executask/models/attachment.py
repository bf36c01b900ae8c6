"""Attachment data models for ExecuTask."""

from typing import Optional

from pydantic import Field

from executask.models.base import ApiModel, Record


class Attachment(Record):
    """Metadata for a file stored in the object store."""

    todo_id: str
    user_id: str
    name: str = Field(..., description="Original file name")
    # Never serialized, so it is also absent when a response is re-validated.
    object_key: Optional[str] = Field(None, exclude=True, description="Object store key")
    file_size: int
    mime_type: str


class AttachmentDownload(ApiModel):
    url: str
    expires_in: int = Field(..., description="Seconds until the URL expires")

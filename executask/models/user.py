"""User data model for ExecuTask."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class User(BaseModel):
    """Authenticated principal as known to ExecuTask."""
    
    id: str = Field(..., description="Identity-provider subject")
    email: Optional[str] = Field(None, description="User email address (contact for notifications)")
    name: Optional[str] = Field(None, description="User display name")
    created_at: datetime = Field(..., description="User creation timestamp")
    updated_at: datetime = Field(..., description="User last update timestamp")

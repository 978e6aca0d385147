"""Message Schemas — Pydantic models with field-level validation for the messaging endpoints.

Invariants:
    - MessageCreate.content: 1-5000 chars after stripping
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.services.messaging import MAX_MESSAGE_LENGTH


class MessageCreate(BaseModel):
    """New message — validates length and whitespace."""
    content: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        # length limits apply to the stripped text
        return v.strip() if isinstance(v, str) else v


class MessageResponse(BaseModel):
    id: UUID
    connection_id: UUID
    sender_id: UUID
    content: str
    read: bool
    created_at: datetime


class MessageList(BaseModel):
    messages: list[MessageResponse]


class MarkReadResponse(BaseModel):
    marked_read: int

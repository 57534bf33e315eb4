from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class ChatResponse(BaseModel):
    """Reply envelope produced by every intent handler."""

    message: str
    suggestions: list[str] | None = None
    action: str | None = None
    data: dict[str, Any] | None = None

    def as_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SendMessageRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=20000)
    conversation_id: str | None = Field(default=None, max_length=64)
    spec_id: int | None = None
    app_id: int | None = None


class ConversationCreateRequest(BaseModel):
    conversation_id: str | None = Field(default=None, max_length=64)
    spec_id: int | None = None
    app_id: int | None = None


class ConversationUpdateRequest(BaseModel):
    current_spec_id: int | None = None
    current_app_id: int | None = None
    last_action: str | None = Field(default=None, max_length=64)


class MessageResponse(BaseModel):
    id: int
    conversation_id: str
    role: str
    content: str
    created_at: datetime

    @field_validator("role", mode="before")
    @classmethod
    def _enum_value(cls, value: Any) -> Any:
        return getattr(value, "value", value)

    class Config:
        from_attributes = True


class ConversationResponse(BaseModel):
    id: int
    conversation_id: str
    current_spec_id: int | None = None
    current_app_id: int | None = None
    last_action: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True

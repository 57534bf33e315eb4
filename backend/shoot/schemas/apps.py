from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from shoot.core.json_utils import loads_text


class AppCreateRequest(BaseModel):
    spec_id: int
    name: str = Field(..., min_length=1, max_length=512)
    description: str | None = None
    framework: str = Field(default="react", max_length=32)
    code: dict[str, str] = Field(default_factory=dict)
    metadata: dict[str, Any] | None = None


class AppCodeUpdate(BaseModel):
    code: dict[str, str]


class GenerateAppRequest(BaseModel):
    spec_id: int
    framework: str = Field(default="react", max_length=32)
    use_ai: bool = True


class GeneratedAppResponse(BaseModel):
    id: int
    spec_id: int
    name: str
    description: str | None = None
    framework: str
    code: dict[str, str] = Field(default_factory=dict)
    metadata: Any = Field(default=None, validation_alias="app_metadata")
    created_at: datetime
    updated_at: datetime | None = None

    @field_validator("code", mode="before")
    @classmethod
    def _decode_code(cls, value: Any) -> Any:
        return loads_text(value, default={})

    @field_validator("metadata", mode="before")
    @classmethod
    def _decode_metadata(cls, value: Any) -> Any:
        return loads_text(value)

    class Config:
        from_attributes = True
        populate_by_name = True


class ApiKeyCreateRequest(BaseModel):
    spec_id: int
    key_name: str = Field(..., min_length=1, max_length=255)
    key_value: str = Field(..., min_length=1)
    description: str | None = None


class ApiKeyResponse(BaseModel):
    id: int
    spec_id: int
    key_name: str
    masked_value: str
    description: str | None = None
    created_at: datetime

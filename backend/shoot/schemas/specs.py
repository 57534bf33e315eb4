from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from shoot.core.json_utils import loads_text


class EndpointInput(BaseModel):
    path: str = Field(..., min_length=1, max_length=1024)
    method: str = Field(..., min_length=1, max_length=16)
    summary: str | None = None
    description: str | None = None
    parameters: str | None = None
    request_body: str | None = None
    responses: str | None = None

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.upper()


class SpecUploadRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=512)
    description: str | None = None
    version: str | None = Field(default=None, max_length=64)
    spec_type: str = Field(default="openapi", pattern="^(openapi|swagger|postman|other)$")
    content: str = Field(..., min_length=2)
    endpoints: list[EndpointInput] = Field(default_factory=list)


class SpecParseRequest(BaseModel):
    content: str | None = None
    spec_url: str | None = Field(default=None, max_length=2048)
    name: str | None = Field(default=None, max_length=512)


class SpecSettingsUpdate(BaseModel):
    override_base_url: str | None = Field(default=None, max_length=1024)


class EndpointResponse(BaseModel):
    id: int
    spec_id: int
    path: str
    method: str
    summary: str | None = None
    description: str | None = None
    parameters: Any = None
    request_body: Any = None
    responses: Any = None

    @field_validator("parameters", "request_body", "responses", mode="before")
    @classmethod
    def _decode_json_text(cls, value: Any) -> Any:
        return loads_text(value)

    class Config:
        from_attributes = True


class SpecSummaryResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    version: str | None = None
    spec_type: str
    endpoint_count: int = 0
    created_at: datetime


class SpecDetailResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    version: str | None = None
    spec_type: str
    content: Any = None
    override_base_url: str | None = None
    created_at: datetime
    endpoints: list[EndpointResponse] = Field(default_factory=list)

    @field_validator("content", mode="before")
    @classmethod
    def _decode_content(cls, value: Any) -> Any:
        # Non-JSON content is returned verbatim.
        if isinstance(value, str):
            return loads_text(value, default=value)
        return value

    @field_validator("spec_type", mode="before")
    @classmethod
    def _enum_value(cls, value: Any) -> Any:
        return getattr(value, "value", value)

    class Config:
        from_attributes = True

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from shoot.core.json_utils import loads_text


class InsightResponse(BaseModel):
    id: int
    spec_id: int
    capabilities: Any = None
    workflows: Any = None
    created_at: datetime

    @field_validator("capabilities", "workflows", mode="before")
    @classmethod
    def _decode_json_text(cls, value: Any) -> Any:
        return loads_text(value)

    class Config:
        from_attributes = True


class WorkflowResponse(BaseModel):
    id: int
    spec_id: int
    name: str
    description: str | None = None
    steps: Any = None
    complexity: str
    code: Any = None
    created_at: datetime

    @field_validator("steps", "code", mode="before")
    @classmethod
    def _decode_json_text(cls, value: Any) -> Any:
        return loads_text(value)

    class Config:
        from_attributes = True


class RemixResponse(BaseModel):
    id: int
    spec_id: int
    name: str
    description: str | None = None
    innovation: str | None = None
    endpoints_used: Any = None
    implementation: Any = None
    created_at: datetime

    @field_validator("endpoints_used", "implementation", mode="before")
    @classmethod
    def _decode_json_text(cls, value: Any) -> Any:
        return loads_text(value)

    class Config:
        from_attributes = True


class InsightSaveRequest(BaseModel):
    spec_id: int
    capabilities: Any = Field(default_factory=dict)
    workflows: Any = Field(default_factory=list)


class WorkflowSaveRequest(BaseModel):
    spec_id: int
    name: str = Field(..., min_length=1, max_length=512)
    description: str | None = None
    steps: list[Any] = Field(default_factory=list)
    complexity: str = Field(default="medium", pattern="^(simple|medium|complex)$")
    code: dict[str, Any] | None = None


class RemixSaveRequest(BaseModel):
    spec_id: int
    name: str = Field(..., min_length=1, max_length=512)
    description: str | None = None
    innovation: str | None = None
    endpoints_used: list[Any] = Field(default_factory=list)
    implementation: dict[str, Any] = Field(default_factory=dict)

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class BuildFromIntentRequest(BaseModel):
    spec_id: int
    intent: str = Field(..., min_length=1, max_length=5000)
    conversation_id: str | None = Field(default=None, max_length=64)


class RefineAppRequest(BaseModel):
    app_id: int
    refinement: str = Field(..., min_length=1, max_length=5000)


class SimulateWorkflowRequest(BaseModel):
    workflow_id: int
    test_data: dict[str, Any] = Field(default_factory=dict)


class CustomerAppRequest(BaseModel):
    spec_id: int
    description: str = Field(..., min_length=1, max_length=5000)


class RefineUiRequest(BaseModel):
    app_id: int
    request: str = Field(..., min_length=1, max_length=5000)


class ComponentDesignRequest(BaseModel):
    spec_id: int
    description: str = Field(..., min_length=1, max_length=5000)
    style: str | None = Field(default=None, max_length=500)


class AddFeatureRequest(BaseModel):
    app_id: int
    feature: str = Field(..., min_length=1, max_length=5000)


class ModifyComponentRequest(BaseModel):
    app_id: int
    file_name: str = Field(..., min_length=1, max_length=1024)
    instruction: str = Field(..., min_length=1, max_length=5000)


class GenerateComponentRequest(BaseModel):
    spec_id: int
    description: str = Field(..., min_length=1, max_length=5000)
    framework: str = Field(default="react", max_length=32)


class WorkflowGoalRequest(BaseModel):
    spec_id: int
    goal: str = Field(..., min_length=1, max_length=5000)


class RemixRequest(BaseModel):
    spec_id: int
    theme: str | None = Field(default=None, max_length=500)

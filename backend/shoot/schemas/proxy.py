from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SecurityScheme(BaseModel):
    """Subset of an OpenAPI security scheme needed to place a credential."""

    type: str
    name: str | None = None
    location: str | None = Field(default=None, alias="in")
    scheme: str | None = None
    key_name: str | None = None

    class Config:
        populate_by_name = True
        extra = "ignore"


class ProxyAuth(BaseModel):
    api_key_id: int | None = None
    scheme: SecurityScheme | None = None


class ProxyRequest(BaseModel):
    spec_id: int | None = None
    endpoint_path: str = Field(..., min_length=1, max_length=2048)
    method: str = Field(default="GET", max_length=16)
    path_params: dict[str, str] = Field(default_factory=dict)
    query_params: dict[str, str] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None
    base_url: str | None = Field(default=None, max_length=2048)
    auth: ProxyAuth | None = None


class ProxyResponse(BaseModel):
    status: int
    status_text: str
    headers: dict[str, str]
    data: Any = None
    time: float
    url: str

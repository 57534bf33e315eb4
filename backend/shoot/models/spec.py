"""
Shoot - API Spec Models
=======================
Uploaded OpenAPI/Swagger documents and the endpoints extracted from them.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from shoot.core.database import Base


class SpecType(str, enum.Enum):
    openapi = "openapi"
    swagger = "swagger"
    postman = "postman"
    other = "other"


class ApiSpec(Base):
    __tablename__ = "api_specs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    version = Column(String(64), nullable=True)
    spec_type = Column(Enum(SpecType, name="spec_type"), nullable=False, default=SpecType.openapi)
    content = Column(Text, nullable=False)  # JSON text of the parsed document
    override_base_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    endpoints = relationship(
        "ApiEndpoint",
        back_populates="spec",
        order_by="ApiEndpoint.id",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_api_specs_created", "created_at"),
    )


class ApiEndpoint(Base):
    """One (path, method) pair. Never updated; re-upload creates a new spec."""

    __tablename__ = "api_endpoints"

    id = Column(Integer, primary_key=True, autoincrement=True)
    spec_id = Column(Integer, ForeignKey("api_specs.id"), nullable=False, index=True)
    path = Column(String(1024), nullable=False)
    method = Column(String(16), nullable=False)
    summary = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    parameters = Column(Text, nullable=True)
    request_body = Column(Text, nullable=True)
    responses = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    spec = relationship("ApiSpec", back_populates="endpoints")

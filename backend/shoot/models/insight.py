"""
LLM analysis records scoped to a spec.
Insight is one row per spec; workflows and remixes accumulate.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from shoot.core.database import Base


class Insight(Base):
    __tablename__ = "insights"

    id = Column(Integer, primary_key=True, autoincrement=True)
    spec_id = Column(Integer, ForeignKey("api_specs.id"), nullable=False, unique=True, index=True)
    capabilities = Column(Text, nullable=False)  # JSON text
    workflows = Column(Text, nullable=False)  # JSON text
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Workflow(Base):
    __tablename__ = "workflows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    spec_id = Column(Integer, ForeignKey("api_specs.id"), nullable=False, index=True)
    name = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    steps = Column(Text, nullable=False)  # JSON text
    complexity = Column(String(32), nullable=False, default="medium")  # simple|medium|complex
    code = Column(Text, nullable=True)  # JSON text
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Remix(Base):
    __tablename__ = "remixes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    spec_id = Column(Integer, ForeignKey("api_specs.id"), nullable=False, index=True)
    name = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    innovation = Column(Text, nullable=True)
    endpoints_used = Column(Text, nullable=False)  # JSON text
    implementation = Column(Text, nullable=False)  # JSON text
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

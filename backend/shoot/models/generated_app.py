from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from shoot.core.database import Base


class GeneratedApp(Base):
    """A framework-tagged file set generated from a spec."""

    __tablename__ = "generated_apps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    spec_id = Column(Integer, ForeignKey("api_specs.id"), nullable=False, index=True)
    name = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    framework = Column(String(32), nullable=False, default="react")  # react|node|express|...
    code = Column(Text, nullable=False)  # JSON text: {filename: source}
    app_metadata = Column("metadata", Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_generated_apps_spec_created", "spec_id", "created_at"),
    )

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from shoot.core.database import Base


class ApiKey(Base):
    """Credential for a spec's target API. `key_value` is plaintext; reads go through mask_key."""

    __tablename__ = "api_keys"

    id = Column(Integer, primary_key=True, autoincrement=True)
    spec_id = Column(Integer, ForeignKey("api_specs.id"), nullable=False, index=True)
    key_name = Column(String(255), nullable=False)
    key_value = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

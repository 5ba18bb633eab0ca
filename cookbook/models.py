from sqlalchemy import Column, DateTime, Integer, String, Text, func

from .db import Base


class Setting(Base):
    """One entry of the key-value store (language preference, cached maps)."""
    __tablename__ = "settings"
    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(200), unique=True, index=True, nullable=False)
    value = Column(Text, nullable=True)  # plain string or JSON-encoded map
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

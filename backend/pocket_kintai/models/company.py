from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pocket_kintai.core.database import Base


class Company(Base):
    """A tenant. Exposed externally only through its derived public_id."""
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    # Filled in right after insert, once the internal id is known
    public_id = Column(String(16), unique=True, index=True, nullable=True)
    name = Column(String, nullable=False)
    logo_url = Column(String, nullable=True)
    settings = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    users = relationship("User", back_populates="company")

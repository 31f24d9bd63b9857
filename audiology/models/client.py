"""Client model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from audiology.core.clock import utcnow
from audiology.database import Base
from audiology.models.user import new_uuid


class Client(Base):
    """A patient registered with a practice."""
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String, nullable=False)
    email = Column(String)
    phone = Column(String)
    practice_id = Column(String(36), ForeignKey("practices.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    practice = relationship('Practice', back_populates='clients')

"""Branch model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from audiology.core.clock import utcnow
from audiology.database import Base
from audiology.models.user import new_uuid


class Branch(Base):
    """A satellite site of a practice."""
    __tablename__ = "branches"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String, nullable=False)
    address = Column(String)
    practice_id = Column(String(36), ForeignKey("practices.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    practice = relationship('Practice', back_populates='branches')

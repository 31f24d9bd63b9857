"""Procedure model definitions."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from audiology.core.clock import utcnow
from audiology.database import Base
from audiology.models.user import new_uuid

DEFAULT_PROCEDURE_DURATION_MINUTES = 30


class Procedure(Base):
    """A bookable service offered by a practice, such as a hearing test or fitting."""
    __tablename__ = "procedures"
    __table_args__ = (
        CheckConstraint('duration_minutes > 0', name='ck_procedures_duration_positive'),
    )

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String, nullable=False)
    description = Column(Text)
    duration_minutes = Column(Integer, default=DEFAULT_PROCEDURE_DURATION_MINUTES, nullable=False)
    practice_id = Column(String(36), ForeignKey("practices.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    practice = relationship('Practice', back_populates='procedures')

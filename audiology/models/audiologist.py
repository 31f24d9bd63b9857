"""Audiologist model definitions."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from audiology.core.clock import utcnow
from audiology.database import Base
from audiology.models.user import new_uuid


class Audiologist(Base):
    """Practitioner profile linking a user to a practice."""
    __tablename__ = "audiologists"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    practice_id = Column(String(36), ForeignKey("practices.id", ondelete="CASCADE"), nullable=False, index=True)
    specialization = Column(String)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship('User', back_populates='audiologist_profiles')
    practice = relationship('Practice', back_populates='audiologists')
    appointments = relationship(
        'Appointment',
        back_populates='audiologist',
        cascade='all, delete-orphan',
    )

    @property
    def full_name(self) -> str:
        if self.user is None:
            return 'Unknown'
        return self.user.name or self.user.email

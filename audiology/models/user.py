"""User model definitions."""

import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from audiology.core.clock import utcnow
from audiology.database import Base


def new_uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Local mirror of an identity issued by the external auth provider."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_uuid)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False, default='')
    role = Column(String, nullable=False, default='audiologist')  # admin/audiologist/assistant
    created_at = Column(DateTime, default=utcnow, nullable=False)

    audiologist_profiles = relationship(
        'Audiologist',
        back_populates='user',
        cascade='all, delete-orphan',
    )
    created_appointments = relationship(
        'Appointment',
        back_populates='creator',
        cascade='all, delete-orphan',
    )

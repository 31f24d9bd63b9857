"""Practice model definitions."""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from audiology.core.clock import utcnow
from audiology.database import Base
from audiology.models.user import new_uuid


class Practice(Base):
    """A clinic that owns audiologists, branches, clients and procedures."""
    __tablename__ = "practices"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String, nullable=False)
    address = Column(String)
    phone = Column(String)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    audiologists = relationship(
        'Audiologist',
        back_populates='practice',
        cascade='all, delete-orphan',
    )
    branches = relationship('Branch', back_populates='practice', cascade='all, delete-orphan')
    clients = relationship('Client', back_populates='practice', cascade='all, delete-orphan')
    procedures = relationship('Procedure', back_populates='practice', cascade='all, delete-orphan')

"""Appointment model definitions."""

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from audiology.core.clock import utcnow
from audiology.core.config import DEFAULT_APPOINTMENT_DURATION_MINUTES
from audiology.core.lifecycle import INITIAL_STATUS, AppointmentStatus
from audiology.database import Base
from audiology.models.user import new_uuid


class Appointment(Base):
    """Represents a patient appointment with an audiologist."""
    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint('duration_minutes > 0', name='ck_appointments_duration_positive'),
        Index('idx_appointments_audiologist_date', 'audiologist_id', 'appointment_date'),
        Index('idx_appointments_status_date', 'status', 'appointment_date'),
    )

    id = Column(String(36), primary_key=True, default=new_uuid)
    patient_name = Column(String, nullable=False)
    patient_email = Column(String)
    patient_phone = Column(String)
    audiologist_id = Column(String(36), ForeignKey("audiologists.id", ondelete="CASCADE"), nullable=False)
    appointment_date = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, default=DEFAULT_APPOINTMENT_DURATION_MINUTES, nullable=False)
    status = Column(
        Enum(
            AppointmentStatus,
            name='appointment_status',
            native_enum=False,
            create_constraint=True,
            validate_strings=True,
            values_callable=lambda statuses: [status.value for status in statuses],
        ),
        default=INITIAL_STATUS,
        nullable=False,
    )
    notes = Column(Text)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    audiologist = relationship('Audiologist', back_populates='appointments')
    creator = relationship('User', back_populates='created_appointments')

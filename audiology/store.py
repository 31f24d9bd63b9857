"""Persistence interface for appointments.

Route handlers and scripts go through :class:`AppointmentStore` rather than
touching the session directly, so every status change passes the lifecycle
check and every mutation refreshes ``updated_at`` in the same commit.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from audiology.core.clock import utcnow
from audiology.core.lifecycle import AppointmentStatus, apply_transition, parse_status
from audiology.models.appointment import Appointment
from audiology.models.audiologist import Audiologist
from audiology.models.branch import Branch
from audiology.models.client import Client
from audiology.models.practice import Practice
from audiology.models.procedure import Procedure
from audiology.models.user import User

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = frozenset({'patient_name', 'audiologist_id', 'appointment_date', 'duration_minutes'})

UPDATABLE_FIELDS = frozenset({
    'patient_name',
    'patient_email',
    'patient_phone',
    'audiologist_id',
    'appointment_date',
    'duration_minutes',
    'status',
    'notes',
})


class AppointmentNotFound(LookupError):
    def __init__(self, appointment_id: str):
        self.appointment_id = appointment_id
        super().__init__(f'Appointment {appointment_id} not found.')


class AudiologistNotFound(LookupError):
    def __init__(self, audiologist_id: str):
        self.audiologist_id = audiologist_id
        super().__init__(f'Audiologist {audiologist_id} not found.')


def _validate_duration(duration_minutes: int | None) -> None:
    if duration_minutes is not None and duration_minutes <= 0:
        raise ValueError('Duration must be a positive number of minutes.')


class AppointmentStore:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def _require_audiologist(self, audiologist_id: str) -> Audiologist:
        audiologist = self.db.get(Audiologist, audiologist_id)
        if audiologist is None:
            raise AudiologistNotFound(audiologist_id)
        return audiologist

    def create(self, fields: Mapping[str, Any], created_by: str) -> Appointment:
        _validate_duration(fields.get('duration_minutes'))
        self._require_audiologist(fields['audiologist_id'])

        now = utcnow()
        values = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS and value is not None}
        values.pop('status', None)

        appointment = Appointment(
            **values,
            status=AppointmentStatus.SCHEDULED,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self.db.add(appointment)
        self._commit()
        self.db.refresh(appointment)

        logger.info('Created appointment %s for audiologist %s', appointment.id, appointment.audiologist_id)
        return appointment

    def get_by_id(self, appointment_id: str) -> Appointment | None:
        return self.db.get(Appointment, appointment_id)

    def require(self, appointment_id: str) -> Appointment:
        appointment = self.get_by_id(appointment_id)
        if appointment is None:
            raise AppointmentNotFound(appointment_id)
        return appointment

    def list_by_audiologist(self, audiologist_id: str) -> list[Appointment]:
        query = (
            select(Appointment)
            .where(Appointment.audiologist_id == audiologist_id)
            .order_by(Appointment.appointment_date.asc())
        )
        return list(self.db.scalars(query))

    def search(
        self,
        audiologist_ids: Iterable[str] | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        status: AppointmentStatus | str | None = None,
    ) -> list[Appointment]:
        query = (
            select(Appointment)
            .options(selectinload(Appointment.audiologist).selectinload(Audiologist.user))
            .where(*self._filters(audiologist_ids, start_date, end_date))
            .order_by(Appointment.appointment_date.asc())
        )
        if status is not None:
            query = query.where(Appointment.status == parse_status(status))
        return list(self.db.scalars(query))

    def update(self, appointment_id: str, patch: Mapping[str, Any]) -> Appointment:
        """Apply a partial update.

        A ``status`` entry equal to the current status is ignored; any other
        status goes through the lifecycle and may raise ``InvalidTransition``,
        in which case nothing in the patch is applied.
        """
        appointment = self.require(appointment_id)
        unknown_fields = set(patch) - UPDATABLE_FIELDS
        if unknown_fields:
            raise ValueError(f'Unknown appointment fields: {", ".join(sorted(unknown_fields))}.')

        _validate_duration(patch.get('duration_minutes'))
        if patch.get('audiologist_id') is not None:
            self._require_audiologist(patch['audiologist_id'])
        missing = sorted(field for field in REQUIRED_FIELDS if field in patch and not patch[field])
        if missing:
            raise ValueError(f'Fields cannot be cleared: {", ".join(missing)}.')

        now = utcnow()
        requested_status = patch.get('status')
        if requested_status is not None and parse_status(requested_status) != appointment.status:
            apply_transition(appointment, requested_status, now=now)

        for field, value in patch.items():
            if field == 'status':
                continue
            setattr(appointment, field, value)
        appointment.updated_at = now

        self._commit()
        self.db.refresh(appointment)

        logger.info('Updated appointment %s (%s)', appointment.id, ', '.join(sorted(patch)) or 'no fields')
        return appointment

    def transition(self, appointment_id: str, target: AppointmentStatus | str) -> Appointment:
        appointment = self.require(appointment_id)
        previous = appointment.status
        apply_transition(appointment, target)

        self._commit()
        self.db.refresh(appointment)

        logger.info('Appointment %s moved from %s to %s', appointment.id, previous.value, appointment.status.value)
        return appointment

    def delete(self, appointment_id: str) -> None:
        appointment = self.require(appointment_id)
        self.db.delete(appointment)
        self._commit()
        logger.info('Deleted appointment %s', appointment_id)

    def stats(
        self,
        audiologist_ids: Iterable[str] | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        now: datetime | None = None,
    ) -> dict[str, int]:
        now = now or utcnow()
        base_filters = self._filters(audiologist_ids, start_date, end_date)

        def count(*extra_filters) -> int:
            query = select(func.count(Appointment.id)).where(*base_filters, *extra_filters)
            return self.db.scalar(query) or 0

        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        day_end = day_start + timedelta(days=1)
        week_end = day_start + timedelta(days=8)
        scheduled = Appointment.status == AppointmentStatus.SCHEDULED

        return {
            'total_appointments': count(),
            'scheduled': count(scheduled),
            'completed': count(Appointment.status == AppointmentStatus.COMPLETED),
            'cancelled': count(Appointment.status == AppointmentStatus.CANCELLED),
            'upcoming_today': count(
                scheduled,
                Appointment.appointment_date >= day_start,
                Appointment.appointment_date < day_end,
            ),
            'upcoming_week': count(
                scheduled,
                Appointment.appointment_date >= now,
                Appointment.appointment_date < week_end,
            ),
        }

    @staticmethod
    def _filters(
        audiologist_ids: Iterable[str] | None,
        start_date: datetime | None,
        end_date: datetime | None,
    ) -> list:
        filters = []
        if audiologist_ids is not None:
            filters.append(Appointment.audiologist_id.in_(list(audiologist_ids)))
        if start_date is not None:
            filters.append(Appointment.appointment_date >= start_date)
        if end_date is not None:
            filters.append(Appointment.appointment_date <= end_date)
        return filters


class PracticeStore:
    def __init__(self, db: Session):
        self.db = db

    def create(self, name: str, address: str | None = None, phone: str | None = None) -> Practice:
        practice = Practice(name=name, address=address, phone=phone)
        self.db.add(practice)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(practice)
        return practice

    def list(self) -> list[Practice]:
        return list(self.db.scalars(select(Practice).order_by(Practice.name.asc())))

    def delete(self, practice_id: str) -> bool:
        """Delete a practice together with its audiologists and their appointments."""
        practice = self.db.get(Practice, practice_id)
        if practice is None:
            return False
        self.db.delete(practice)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        logger.info('Deleted practice %s', practice_id)
        return True


class AudiologistStore:
    def __init__(self, db: Session):
        self.db = db

    def list(self, practice_id: str | None = None, active_only: bool = False) -> list[Audiologist]:
        query = (
            select(Audiologist)
            .join(User, Audiologist.user_id == User.id)
            .options(selectinload(Audiologist.user))
            .order_by(User.name.asc())
        )
        if practice_id is not None:
            query = query.where(Audiologist.practice_id == practice_id)
        if active_only:
            query = query.where(Audiologist.is_active.is_(True))
        return list(self.db.scalars(query))

    def get_by_id(self, audiologist_id: str) -> Audiologist | None:
        return self.db.get(Audiologist, audiologist_id)


class PracticeCatalogStore:
    """Read access to the branches, clients and procedures a practice owns."""

    def __init__(self, db: Session):
        self.db = db

    def _list(self, model, practice_id: str | None) -> list:
        query = select(model).order_by(model.name.asc())
        if practice_id is not None:
            query = query.where(model.practice_id == practice_id)
        return list(self.db.scalars(query))

    def list_branches(self, practice_id: str | None = None) -> list[Branch]:
        return self._list(Branch, practice_id)

    def list_clients(self, practice_id: str | None = None) -> list[Client]:
        return self._list(Client, practice_id)

    def list_procedures(self, practice_id: str | None = None) -> list[Procedure]:
        return self._list(Procedure, practice_id)

"""Appointment status state machine.

An appointment starts out ``scheduled`` and moves exactly once into one of the
terminal states. Nothing leaves a terminal state.
"""

import enum
from datetime import datetime

from audiology.core.clock import utcnow


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = 'scheduled'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    NO_SHOW = 'no-show'


INITIAL_STATUS = AppointmentStatus.SCHEDULED

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in ALLOWED_TRANSITIONS.items() if not targets)


class InvalidTransition(Exception):
    """Raised when a status change is not allowed from the appointment's current status."""

    def __init__(self, current: AppointmentStatus, target: AppointmentStatus):
        self.current = current
        self.target = target
        super().__init__(f'Cannot change appointment status from {current.value} to {target.value}.')


def parse_status(value: 'AppointmentStatus | str') -> AppointmentStatus:
    if isinstance(value, AppointmentStatus):
        return value
    try:
        return AppointmentStatus(value.strip().lower())
    except ValueError as exc:
        raise ValueError(f'Invalid appointment status: {value!r}.') from exc


def is_terminal(status: 'AppointmentStatus | str') -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def can_transition(current: 'AppointmentStatus | str', target: 'AppointmentStatus | str') -> bool:
    return parse_status(target) in ALLOWED_TRANSITIONS[parse_status(current)]


def apply_transition(appointment, target: 'AppointmentStatus | str', now: datetime | None = None):
    """Move ``appointment`` to ``target``, refreshing ``updated_at`` in the same step.

    The appointment is left untouched when the transition is rejected.
    """
    current = parse_status(appointment.status)
    target = parse_status(target)

    if not can_transition(current, target):
        raise InvalidTransition(current, target)

    appointment.status = target
    appointment.updated_at = now or utcnow()
    return appointment

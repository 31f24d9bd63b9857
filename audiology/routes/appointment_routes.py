from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from audiology.auth.dependencies import get_current_user
from audiology.core.clock import to_naive_utc
from audiology.core.config import DEFAULT_APPOINTMENT_DURATION_MINUTES
from audiology.core.lifecycle import AppointmentStatus, InvalidTransition
from audiology.database import get_db
from audiology.models.appointment import Appointment
from audiology.models.user import User
from audiology.routes.common import database_unavailable, ensure_database_ready, parse_id_list
from audiology.store import AppointmentNotFound, AppointmentStore, AudiologistNotFound

router = APIRouter(tags=['appointments'])

MAX_APPOINTMENT_NOTES_LENGTH = 2000


def _normalize_optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


def _normalize_email(value: str | None) -> str | None:
    normalized = _normalize_optional_text(value)
    return normalized.lower() if normalized else None


def _normalize_notes(value: str | None) -> str | None:
    normalized = _normalize_optional_text(value)
    if normalized is not None and len(normalized) > MAX_APPOINTMENT_NOTES_LENGTH:
        raise ValueError(f'Notes must be {MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')
    return normalized


class CreateAppointmentRequest(BaseModel):
    patient_name: str
    patient_email: str | None = None
    patient_phone: str | None = None
    audiologist_id: str
    appointment_date: datetime
    duration_minutes: int = Field(default=DEFAULT_APPOINTMENT_DURATION_MINUTES, gt=0)
    notes: str | None = None

    @field_validator('patient_name')
    @classmethod
    def validate_patient_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Patient name is required.')
        return normalized

    @field_validator('patient_email')
    @classmethod
    def validate_patient_email(cls, value: str | None) -> str | None:
        return _normalize_email(value)

    @field_validator('patient_phone')
    @classmethod
    def validate_patient_phone(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value)

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)

    @field_validator('appointment_date')
    @classmethod
    def validate_appointment_date(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class UpdateAppointmentRequest(BaseModel):
    patient_name: str | None = None
    patient_email: str | None = None
    patient_phone: str | None = None
    audiologist_id: str | None = None
    appointment_date: datetime | None = None
    duration_minutes: int | None = Field(default=None, gt=0)
    status: AppointmentStatus | None = None
    notes: str | None = None

    @field_validator('patient_name')
    @classmethod
    def validate_patient_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            raise ValueError('Patient name cannot be blank.')
        return normalized

    @field_validator('patient_email')
    @classmethod
    def validate_patient_email(cls, value: str | None) -> str | None:
        return _normalize_email(value)

    @field_validator('patient_phone')
    @classmethod
    def validate_patient_phone(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value)

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)

    @field_validator('appointment_date')
    @classmethod
    def validate_appointment_date(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)


class StatusChangeRequest(BaseModel):
    status: AppointmentStatus


class AudiologistSummaryResponse(BaseModel):
    id: str
    full_name: str


class AppointmentResponse(BaseModel):
    id: str
    patient_name: str
    patient_email: str | None = None
    patient_phone: str | None = None
    audiologist: AudiologistSummaryResponse
    appointment_date: datetime
    duration_minutes: int
    status: AppointmentStatus
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class DeleteAppointmentResponse(BaseModel):
    success: bool


def to_appointment_response(appointment: Appointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=appointment.id,
        patient_name=appointment.patient_name,
        patient_email=appointment.patient_email,
        patient_phone=appointment.patient_phone,
        audiologist=AudiologistSummaryResponse(
            id=appointment.audiologist_id,
            full_name=appointment.audiologist.full_name if appointment.audiologist else 'Unknown',
        ),
        appointment_date=appointment.appointment_date,
        duration_minutes=appointment.duration_minutes,
        status=appointment.status,
        notes=appointment.notes,
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
    )


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _conflict(exc: InvalidTransition) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get('/appointments', response_model=list[AppointmentResponse])
def list_appointments(
    audiologist_ids: str | None = Query(default=None, description='Comma-separated audiologist IDs'),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    appointment_status: AppointmentStatus | None = Query(default=None, alias='status'),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)

    try:
        appointments = AppointmentStore(db).search(
            audiologist_ids=parse_id_list(audiologist_ids),
            start_date=to_naive_utc(start_date),
            end_date=to_naive_utc(end_date),
            status=appointment_status,
        )
        return [to_appointment_response(appointment) for appointment in appointments]
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/appointments/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)

    try:
        appointment = AppointmentStore(db).get_by_id(appointment_id)
        if appointment is None:
            raise _not_found('Appointment not found.')
        return to_appointment_response(appointment)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('/appointments', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)

    try:
        appointment = AppointmentStore(db).create(data.model_dump(), created_by=current_user.id)
        return to_appointment_response(appointment)
    except AudiologistNotFound as exc:
        raise _not_found('Audiologist not found.') from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.put('/appointments/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(
    appointment_id: str,
    data: UpdateAppointmentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)

    try:
        appointment = AppointmentStore(db).update(appointment_id, data.model_dump(exclude_unset=True))
        return to_appointment_response(appointment)
    except AppointmentNotFound as exc:
        raise _not_found('Appointment not found.') from exc
    except AudiologistNotFound as exc:
        raise _not_found('Audiologist not found.') from exc
    except InvalidTransition as exc:
        raise _conflict(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('/appointments/{appointment_id}/status', response_model=AppointmentResponse)
def change_appointment_status(
    appointment_id: str,
    data: StatusChangeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)

    try:
        appointment = AppointmentStore(db).transition(appointment_id, data.status)
        return to_appointment_response(appointment)
    except AppointmentNotFound as exc:
        raise _not_found('Appointment not found.') from exc
    except InvalidTransition as exc:
        raise _conflict(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.delete('/appointments/{appointment_id}', response_model=DeleteAppointmentResponse)
def delete_appointment(
    appointment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)

    try:
        AppointmentStore(db).delete(appointment_id)
        return DeleteAppointmentResponse(success=True)
    except AppointmentNotFound as exc:
        raise _not_found('Appointment not found.') from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

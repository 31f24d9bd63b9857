from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from audiology.auth.dependencies import get_current_user
from audiology.database import get_db
from audiology.models.user import User
from audiology.routes.common import database_unavailable, ensure_database_ready, require_admin
from audiology.store import PracticeStore

router = APIRouter(tags=['practices'])


class CreatePracticeRequest(BaseModel):
    name: str
    address: str | None = None
    phone: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Practice name is required.')
        return normalized


class PracticeResponse(BaseModel):
    id: str
    name: str
    address: str | None = None
    phone: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


@router.get('/practices', response_model=list[PracticeResponse])
def list_practices(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)
    try:
        return PracticeStore(db).list()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('/practices', response_model=PracticeResponse, status_code=status.HTTP_201_CREATED)
def create_practice(
    data: CreatePracticeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    ensure_database_ready(db)

    try:
        return PracticeStore(db).create(name=data.name, address=data.address, phone=data.phone)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.delete('/practices/{practice_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_practice(
    practice_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    ensure_database_ready(db)

    try:
        deleted = PracticeStore(db).delete(practice_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Practice not found.')

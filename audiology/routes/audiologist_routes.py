from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from audiology.auth.dependencies import get_current_user
from audiology.database import get_db
from audiology.models.audiologist import Audiologist
from audiology.models.user import User
from audiology.routes.common import database_unavailable, ensure_database_ready
from audiology.store import AudiologistStore

router = APIRouter(tags=['audiologists'])


class AudiologistResponse(BaseModel):
    id: str
    user_id: str
    practice_id: str
    full_name: str
    specialization: str | None = None
    is_active: bool


class AssistantResponse(BaseModel):
    id: str
    full_name: str


def to_audiologist_response(audiologist: Audiologist) -> AudiologistResponse:
    return AudiologistResponse(
        id=audiologist.id,
        user_id=audiologist.user_id,
        practice_id=audiologist.practice_id,
        full_name=audiologist.full_name,
        specialization=audiologist.specialization,
        is_active=audiologist.is_active,
    )


@router.get('/audiologists', response_model=list[AudiologistResponse])
def list_audiologists(
    practice_id: str | None = Query(default=None, description='Filter by practice ID'),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)
    try:
        audiologists = AudiologistStore(db).list(practice_id=practice_id)
        return [to_audiologist_response(audiologist) for audiologist in audiologists]
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/audiologists/{audiologist_id}', response_model=AudiologistResponse)
def get_audiologist(
    audiologist_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)
    try:
        audiologist = AudiologistStore(db).get_by_id(audiologist_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if audiologist is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Audiologist not found.')
    return to_audiologist_response(audiologist)


@router.get('/assistants', response_model=list[AssistantResponse])
def list_assistants(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)
    try:
        audiologists = AudiologistStore(db).list(active_only=True)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return [AssistantResponse(id=audiologist.id, full_name=audiologist.full_name) for audiologist in audiologists]

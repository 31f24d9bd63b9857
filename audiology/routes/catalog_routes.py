import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from audiology.auth.dependencies import get_current_user
from audiology.database import get_db
from audiology.models.user import User
from audiology.routes.common import database_unavailable, ensure_database_ready
from audiology.store import PracticeCatalogStore

router = APIRouter(tags=['catalog'])

logger = logging.getLogger(__name__)


class BranchResponse(BaseModel):
    id: str
    name: str
    address: str | None = None

    class Config:
        from_attributes = True


class ClientResponse(BaseModel):
    id: str
    name: str
    email: str | None = None
    phone: str | None = None

    class Config:
        from_attributes = True


class ProcedureResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    duration_minutes: int

    class Config:
        from_attributes = True


@router.get('/branches', response_model=list[BranchResponse])
def list_branches(
    practice_id: str | None = Query(default=None, description='Filter by practice ID'),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)
    try:
        branches = PracticeCatalogStore(db).list_branches(practice_id=practice_id)
    except SQLAlchemyError as exc:
        logger.exception('Failed to list branches')
        raise database_unavailable() from exc

    logger.info('Listed %d branches', len(branches))
    return branches


@router.get('/clients', response_model=list[ClientResponse])
def list_clients(
    practice_id: str | None = Query(default=None, description='Filter by practice ID'),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)
    try:
        clients = PracticeCatalogStore(db).list_clients(practice_id=practice_id)
    except SQLAlchemyError as exc:
        logger.exception('Failed to list clients')
        raise database_unavailable() from exc

    logger.info('Listed %d clients', len(clients))
    return clients


@router.get('/procedures', response_model=list[ProcedureResponse])
def list_procedures(
    practice_id: str | None = Query(default=None, description='Filter by practice ID'),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)
    try:
        procedures = PracticeCatalogStore(db).list_procedures(practice_id=practice_id)
    except SQLAlchemyError as exc:
        logger.exception('Failed to list procedures')
        raise database_unavailable() from exc

    logger.info('Listed %d procedures', len(procedures))
    return procedures

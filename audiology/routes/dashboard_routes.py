import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from audiology.auth.dependencies import get_current_user
from audiology.core.clock import to_naive_utc
from audiology.database import get_db
from audiology.models.user import User
from audiology.routes.common import database_unavailable, ensure_database_ready, parse_id_list
from audiology.store import AppointmentStore

router = APIRouter(tags=['dashboard'])

logger = logging.getLogger(__name__)


class DashboardStatsResponse(BaseModel):
    total_appointments: int
    scheduled: int
    completed: int
    cancelled: int
    upcoming_today: int
    upcoming_week: int


@router.get('/dashboard/stats', response_model=DashboardStatsResponse)
def get_dashboard_stats(
    audiologist_ids: str | None = Query(default=None, description='Comma-separated audiologist IDs'),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_database_ready(db)

    try:
        stats = AppointmentStore(db).stats(
            audiologist_ids=parse_id_list(audiologist_ids),
            start_date=to_naive_utc(start_date),
            end_date=to_naive_utc(end_date),
        )
    except SQLAlchemyError as exc:
        logger.exception('Failed to fetch dashboard statistics')
        raise database_unavailable() from exc

    return DashboardStatsResponse(**stats)

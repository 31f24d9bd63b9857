from fastapi import HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def ensure_database_ready(db: Session) -> None:
    """Fail fast with a 503 when the request's database connection is unusable."""
    try:
        db.execute(text('SELECT 1'))
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


def database_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )


def parse_id_list(value: str | None) -> list[str] | None:
    """Split a comma-separated id filter; a missing or blank value means no filter."""
    if value is None or not value.strip():
        return None
    return [item.strip() for item in value.split(',') if item.strip()]


def require_admin(user) -> None:
    if (user.role or '').lower() != 'admin':
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Only practice admins can manage practices.',
        )

import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from audiology.auth import jwt_handler
from audiology.database import get_db
from audiology.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Clients detect re-login by looking for "session" plus "expired"/"invalid"/"unauthorized"
# in these messages, so keep that wording when editing them.
SESSION_EXPIRED_DETAIL = "Session expired"
SESSION_INVALID_DETAIL = "Invalid session token"
SESSION_MISSING_DETAIL = "Session unauthorized: missing bearer token"
SESSION_USER_MISSING_DETAIL = "Session invalid: user not found"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise _unauthorized(SESSION_MISSING_DETAIL)

    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise _unauthorized(SESSION_EXPIRED_DETAIL) from exc
    except jwt.InvalidTokenError as exc:
        raise _unauthorized(SESSION_INVALID_DETAIL) from exc

    subject = payload.get("sub")
    if not subject:
        raise _unauthorized(SESSION_INVALID_DETAIL)

    user = db.query(User).filter((User.id == subject) | (User.email == subject)).first()
    if user is None:
        logger.warning("Token subject %s has no matching user", subject)
        raise _unauthorized(SESSION_USER_MISSING_DETAIL)
    return user

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from audiology.core import config


def create_access_token(
    subject: str,
    expires_minutes: int | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Sign a session token for ``subject`` (a user id or email).

    Tokens normally come from the external auth provider; this exists for
    local development and tests that share the same secret.
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = config.JWT_EXPIRES_MINUTES if expires_minutes is None else expires_minutes
    payload = dict(extra_claims or {})
    payload.update({"sub": subject, "iat": issued_at, "exp": issued_at + timedelta(minutes=lifetime)})
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    return jwt.decode(
        token,
        config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )

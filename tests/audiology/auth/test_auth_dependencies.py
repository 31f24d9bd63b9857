import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from audiology.auth import jwt_handler
from audiology.auth.dependencies import get_current_user
from audiology.client.session import is_session_expired_error
from audiology.routes.auth_routes import me


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_valid_token_resolves_user_by_id(db, clinic) -> None:
    token = jwt_handler.create_access_token(subject=clinic['admin'].id)

    user = get_current_user(credentials=_credentials(token), db=db)

    assert user.email == 'admin@clinic.example'
    assert me(current_user=user)['role'] == 'admin'


def test_valid_token_resolves_user_by_email(db, clinic) -> None:
    token = jwt_handler.create_access_token(subject='alice@clinic.example')

    assert get_current_user(credentials=_credentials(token), db=db).name == 'Alice Hart'


@pytest.mark.parametrize(
    'token_factory',
    [
        lambda: jwt_handler.create_access_token(subject='admin@clinic.example', expires_minutes=-5),
        lambda: 'not-a-jwt',
        lambda: jwt_handler.create_access_token(subject='ghost@clinic.example'),
    ],
    ids=['expired', 'malformed', 'unknown-user'],
)
def test_rejected_tokens_produce_session_expiry_messages(db, clinic, token_factory) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_current_user(credentials=_credentials(token_factory()), db=db)

    assert exception_info.value.status_code == 401
    assert is_session_expired_error(exception_info.value.detail)


def test_missing_credentials_are_unauthorized(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_current_user(credentials=None, db=db)

    assert exception_info.value.status_code == 401
    assert exception_info.value.headers == {'WWW-Authenticate': 'Bearer'}

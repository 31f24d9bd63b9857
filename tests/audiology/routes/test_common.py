import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from audiology.routes.audiologist_routes import list_assistants
from audiology.routes.common import DATABASE_UNAVAILABLE_DETAIL, ensure_database_ready, parse_id_list
from audiology.routes.practice_routes import list_practices


class _UnreachableSession:
    def execute(self, statement):
        raise OperationalError(str(statement), {}, Exception('connection refused'))


def test_ensure_database_ready_accepts_working_session(db) -> None:
    assert ensure_database_ready(db) is None


def test_ensure_database_ready_maps_connection_failure_to_503() -> None:
    with pytest.raises(HTTPException) as exception_info:
        ensure_database_ready(_UnreachableSession())

    assert exception_info.value.status_code == 503
    assert exception_info.value.detail == DATABASE_UNAVAILABLE_DETAIL
    assert isinstance(exception_info.value.__cause__, OperationalError)


@pytest.mark.parametrize('route', [list_practices, list_assistants])
def test_directory_routes_report_unreachable_database(route) -> None:
    with pytest.raises(HTTPException) as exception_info:
        route(db=_UnreachableSession(), current_user=None)

    assert exception_info.value.status_code == 503


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        (None, None),
        ('  ', None),
        ('a, b,,c ', ['a', 'b', 'c']),
    ],
)
def test_parse_id_list(value, expected) -> None:
    assert parse_id_list(value) == expected

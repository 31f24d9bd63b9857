import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from audiology.routes.audiologist_routes import get_audiologist, list_assistants, list_audiologists
from audiology.routes.dashboard_routes import get_dashboard_stats
from audiology.routes.practice_routes import (
    CreatePracticeRequest,
    create_practice,
    delete_practice,
    list_practices,
)


def test_create_practice_requires_admin(db, clinic) -> None:
    audiologist_user = clinic['alice'].user

    with pytest.raises(HTTPException) as exception_info:
        create_practice(CreatePracticeRequest(name='Eastside'), db=db, current_user=audiologist_user)

    assert exception_info.value.status_code == 403


def test_create_practice_request_rejects_blank_name() -> None:
    with pytest.raises(ValidationError):
        CreatePracticeRequest(name='   ')


def test_admin_can_create_and_list_practices(db, clinic) -> None:
    created = create_practice(CreatePracticeRequest(name=' Eastside '), db=db, current_user=clinic['admin'])

    names = [practice.name for practice in list_practices(db=db, current_user=clinic['admin'])]

    assert created.name == 'Eastside'
    assert names == ['Eastside', 'Northside Hearing']


def test_delete_practice_removes_its_audiologists(db, clinic, make_appointment) -> None:
    make_appointment()
    practice_id = clinic['practice'].id

    delete_practice(practice_id=practice_id, db=db, current_user=clinic['admin'])

    assert list_audiologists(practice_id=practice_id, db=db, current_user=clinic['admin']) == []


def test_delete_practice_returns_404_when_missing(db, clinic) -> None:
    with pytest.raises(HTTPException) as exception_info:
        delete_practice(practice_id='missing', db=db, current_user=clinic['admin'])

    assert exception_info.value.status_code == 404


def test_list_audiologists_includes_names(db, clinic) -> None:
    audiologists = list_audiologists(practice_id=clinic['practice'].id, db=db, current_user=clinic['admin'])

    assert [audiologist.full_name for audiologist in audiologists] == ['Alice Hart', 'Bob Reed']


def test_list_assistants_only_returns_active_audiologists(db, clinic) -> None:
    assistants = list_assistants(db=db, current_user=clinic['admin'])

    assert [assistant.id for assistant in assistants] == [clinic['alice'].id]


def test_get_audiologist_returns_404_when_missing(db, clinic) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_audiologist(audiologist_id='missing', db=db, current_user=clinic['admin'])

    assert exception_info.value.status_code == 404


def test_dashboard_stats_respects_audiologist_filter(db, clinic, make_appointment) -> None:
    make_appointment()
    make_appointment(audiologist_id=clinic['bob'].id)

    stats = get_dashboard_stats(
        audiologist_ids=clinic['bob'].id,
        start_date=None,
        end_date=None,
        db=db,
        current_user=clinic['admin'],
    )

    assert stats.total_appointments == 1
    assert stats.scheduled == 1

import asyncio

import httpx
import pytest

from audiology.client.api import ApiClient
from audiology.client.selection import AudiologistDirectory, AudiologistRef, AudiologistSelection

ALICE = AudiologistRef(id='a-1', full_name='Alice Hart')
BOB = AudiologistRef(id='a-2', full_name='Bob Reed')
CAROL = AudiologistRef(id='a-3', full_name='Carol King')


def test_toggle_appends_then_removes() -> None:
    selection = AudiologistSelection()

    selection.toggle(ALICE)
    selection.toggle(BOB)
    assert selection.ids() == ['a-1', 'a-2']

    selection.toggle(ALICE)
    assert selection.ids() == ['a-2']


def test_toggle_matches_on_id_only() -> None:
    selection = AudiologistSelection([ALICE])

    selection.toggle(AudiologistRef(id='a-1', full_name='Dr. Alice Hart'))

    assert selection.current() == ()


@pytest.mark.parametrize('audiologist', [ALICE, BOB, CAROL])
def test_toggle_twice_restores_selection(audiologist: AudiologistRef) -> None:
    selection = AudiologistSelection([ALICE, BOB])
    before = selection.current()

    selection.toggle(audiologist)
    selection.toggle(audiologist)

    assert [item.id for item in selection.current()] == [item.id for item in before]


def test_toggle_never_duplicates_ids() -> None:
    selection = AudiologistSelection()

    for audiologist in [ALICE, BOB, ALICE, CAROL, AudiologistRef(id='a-2'), BOB, ALICE]:
        selection.toggle(audiologist)
        ids = selection.ids()
        assert len(ids) == len(set(ids))

    assert selection.ids() == ['a-3', 'a-2', 'a-1']


def test_replace_keeps_input_as_given() -> None:
    selection = AudiologistSelection([ALICE])

    selection.replace([BOB, BOB])

    assert selection.ids() == ['a-2', 'a-2']


def test_current_is_a_snapshot() -> None:
    selection = AudiologistSelection([ALICE])
    snapshot = selection.current()

    selection.toggle(BOB)

    assert snapshot == (ALICE,)
    assert selection.as_query_param() == 'a-1,a-2'


def _directory(handler) -> AudiologistDirectory:
    return AudiologistDirectory(ApiClient(base_url='https://clinic.example.com', transport=httpx.MockTransport(handler)))


def test_directory_load_selects_all_active_audiologists() -> None:
    payload = [
        {'id': 'a-1', 'full_name': 'Alice Hart', 'is_active': True},
        {'id': 'a-2', 'full_name': 'Bob Reed', 'is_active': False},
        {'id': 'a-3', 'full_name': 'Carol King'},
    ]
    directory = _directory(lambda request: httpx.Response(200, json=payload))

    loaded = asyncio.run(directory.load())

    assert [audiologist.id for audiologist in loaded] == ['a-1', 'a-3']
    assert directory.selection.ids() == ['a-1', 'a-3']
    assert directory.is_loading is False


def test_directory_load_failure_clears_state() -> None:
    directory = _directory(lambda request: httpx.Response(500, text='boom'))
    directory.selection.replace([ALICE])

    loaded = asyncio.run(directory.load())

    assert loaded == []
    assert directory.all_audiologists == []
    assert directory.selection.current() == ()
    assert directory.is_loading is False


def test_fetch_selected_appointments_sends_selected_ids() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{'id': 'appt-1'}])

    directory = _directory(handler)
    directory.selection.replace([ALICE, CAROL])

    appointments = asyncio.run(directory.fetch_selected_appointments(status='scheduled'))

    assert appointments == [{'id': 'appt-1'}]
    assert seen[0].url.params['audiologist_ids'] == 'a-1,a-3'
    assert seen[0].url.params['status'] == 'scheduled'


def test_fetch_selected_appointments_skips_call_for_empty_selection() -> None:
    seen: list[httpx.Request] = []
    directory = _directory(lambda request: seen.append(request) or httpx.Response(200, json=[]))

    assert asyncio.run(directory.fetch_selected_appointments()) == []
    assert seen == []

"""Audiologist filter state for one client session."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import httpx

from audiology.client.api import ApiClient, ApiError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudiologistRef:
    id: str
    full_name: str = 'Unknown'
    user_id: str | None = None
    specialization: str | None = None
    is_active: bool = True

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> 'AudiologistRef':
        return cls(
            id=str(payload['id']),
            full_name=payload.get('full_name') or 'Unknown',
            user_id=payload.get('user_id'),
            specialization=payload.get('specialization'),
            is_active=bool(payload.get('is_active', True)),
        )


class AudiologistSelection:
    """Ordered set of selected audiologists, keyed by ``id``.

    ``toggle`` never introduces a duplicate id. ``replace`` stores whatever it
    is given, so deduplicating that input is up to the caller.
    """

    def __init__(self, audiologists: Iterable[AudiologistRef] = ()):
        self._selected: list[AudiologistRef] = list(audiologists)

    def toggle(self, audiologist: AudiologistRef) -> None:
        if self.is_selected(audiologist):
            self._selected = [selected for selected in self._selected if selected.id != audiologist.id]
            logger.debug('Deselected audiologist %s, %d selected', audiologist.id, len(self._selected))
        else:
            self._selected = [*self._selected, audiologist]
            logger.debug('Selected audiologist %s, %d selected', audiologist.id, len(self._selected))

    def replace(self, audiologists: Iterable[AudiologistRef]) -> None:
        self._selected = list(audiologists)

    def current(self) -> tuple[AudiologistRef, ...]:
        return tuple(self._selected)

    def is_selected(self, audiologist: AudiologistRef) -> bool:
        return any(selected.id == audiologist.id for selected in self._selected)

    def ids(self) -> list[str]:
        return [selected.id for selected in self._selected]

    def as_query_param(self) -> str:
        return ','.join(self.ids())

    def __len__(self) -> int:
        return len(self._selected)


class AudiologistDirectory:
    """All active audiologists plus the current selection.

    A successful load selects everyone. A failed load is logged and leaves
    both lists empty so the calendar shows nothing rather than stale data.
    """

    def __init__(self, client: ApiClient, selection: AudiologistSelection | None = None):
        self.client = client
        self.selection = selection or AudiologistSelection()
        self.all_audiologists: list[AudiologistRef] = []
        self.is_loading = False

    async def load(self) -> list[AudiologistRef]:
        self.is_loading = True
        try:
            payload = await self.client.get('/api/audiologists')
            audiologists = [
                AudiologistRef.from_payload(item)
                for item in _extract_items(payload)
                if item.get('is_active', True)
            ]
        except (ApiError, httpx.TransportError, ValueError, KeyError):
            logger.exception('Failed to load audiologists')
            audiologists = []
        finally:
            self.is_loading = False

        logger.info('Audiologists loaded: %d', len(audiologists))
        self.all_audiologists = audiologists
        self.selection.replace(audiologists)
        return audiologists

    async def fetch_selected_appointments(self, **filters: str) -> list[dict[str, Any]]:
        """Appointments for the selected audiologists; an empty selection returns nothing."""
        if not len(self.selection):
            return []
        params = {'audiologist_ids': self.selection.as_query_param(), **filters}
        return await self.client.get('/api/appointments', params=params)


def _extract_items(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get('audiologists'), list):
        return payload['audiologists']
    return []

"""Async HTTP client for the practice API.

Every call is sent exactly once: there is no retry, backoff or cancellation
here. Callers that need resilience wrap these calls themselves.
"""

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx

from audiology.core import config

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {'Content-Type': 'application/json'}

TokenProvider = Callable[[], Awaitable[str | None]]


class BackendNotConfigured(RuntimeError):
    def __init__(self):
        super().__init__('Backend URL not configured. Set BACKEND_URL and restart the client.')


class AuthenticationRequired(RuntimeError):
    def __init__(self):
        super().__init__('Authentication token not found. Please sign in.')


class ApiError(Exception):
    """A response arrived, but with a non-success status code."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f'API error: {status} - {body}')

    @property
    def message(self) -> str:
        return str(self)


def bearer_header(token: str | None) -> dict[str, str]:
    if not token:
        return {}
    return {'Authorization': f'Bearer {token}'}


def merge_headers(headers: Mapping[str, str] | httpx.Headers | None) -> httpx.Headers:
    # Header names are case-insensitive, so a caller's content-type replaces ours.
    merged = httpx.Headers(DEFAULT_HEADERS)
    if headers:
        merged.update(headers)
    return merged


class ApiClient:
    def __init__(self, base_url: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = (config.BACKEND_URL if base_url is None else base_url).rstrip('/')
        self._transport = transport

    def build_url(self, endpoint: str) -> str:
        if not self.base_url:
            raise BackendNotConfigured()
        return f'{self.base_url}{endpoint}'

    async def request(
        self,
        endpoint: str,
        method: str = 'GET',
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
        params: Mapping[str, str] | None = None,
    ) -> Any:
        url = self.build_url(endpoint)
        logger.info('[API] Calling %s %s', method, url)

        content = None if json_body is None else json.dumps(json_body)
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    headers=merge_headers(headers),
                    content=content,
                    params=params,
                )

                if not response.is_success:
                    text = response.text
                    logger.error('[API] Error response: %s %s', response.status_code, text)
                    raise ApiError(response.status_code, text)

                data = response.json()
        except ApiError:
            raise
        except (httpx.HTTPError, ValueError):
            logger.exception('[API] Request failed: %s %s', method, url)
            raise

        logger.debug('[API] Success: %s', data)
        return data

    async def get(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        return await self.request(endpoint, method='GET', params=params)

    async def post(self, endpoint: str, data: Any) -> Any:
        return await self.request(endpoint, method='POST', json_body=data)

    async def put(self, endpoint: str, data: Any) -> Any:
        return await self.request(endpoint, method='PUT', json_body=data)

    async def patch(self, endpoint: str, data: Any) -> Any:
        return await self.request(endpoint, method='PATCH', json_body=data)

    async def delete(self, endpoint: str, data: Any = None) -> Any:
        # Some servers reject a JSON content type with an empty body, so always send one.
        return await self.request(endpoint, method='DELETE', json_body={} if data is None else data)


class AuthenticatedApiClient(ApiClient):
    """ApiClient that attaches ``Authorization: Bearer <token>`` to every call."""

    def __init__(
        self,
        token_provider: TokenProvider,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(base_url=base_url, transport=transport)
        self._token_provider = token_provider

    async def request(
        self,
        endpoint: str,
        method: str = 'GET',
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
        params: Mapping[str, str] | None = None,
    ) -> Any:
        token = await self._token_provider()
        if not token:
            raise AuthenticationRequired()

        auth_headers = httpx.Headers(headers or {})
        auth_headers.update(bearer_header(token))
        return await super().request(endpoint, method=method, headers=auth_headers, json_body=json_body, params=params)

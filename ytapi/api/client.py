"""Generic Google REST API client."""

import asyncio
import logging
from typing import Any, Mapping
from urllib.parse import quote

import httpx

from ytapi.auth.tokens import TokenProvider
from ytapi.errors import (
    GoogleApiError,
    HttpAbortError,
    HttpBodyParseError,
    HttpNetworkError,
    HttpTimeoutError,
)

logger = logging.getLogger(__name__)

API_BASE = "https://www.googleapis.com/"

QUERY_PARAMETERS_SEPARATOR = "&"

# Methods whose data travels in the query string rather than the body
QUERY_METHODS = ("GET", "DELETE")

# Characters encodeURIComponent leaves alone besides alphanumerics and "_.-~"
_URI_COMPONENT_SAFE = "!*'()"


def _encode_component(value: Any) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


def encode_query_data(data: Mapping[str, Any]) -> str:
    """Serialize parameters into a query string without the leading ``?``.

    Keys keep their insertion order, keys and values are percent-encoded
    independently, booleans are written as ``true``/``false`` and ``None``
    values are left out.

    Example:
        >>> encode_query_data({"part": "id,snippet", "mine": True})
        'part=id%2Csnippet&mine=true'
    """
    return QUERY_PARAMETERS_SEPARATOR.join(
        f"{_encode_component(name)}={_encode_component(value)}"
        for name, value in data.items()
        if value is not None
    )


class ApiClient:
    """Client for a single service of the Google REST API.

    Requests are sent either with the API key (``authorized=False``) or
    with an OAuth 2.0 bearer token from the token provider
    (``authorized=True``), never both.

    The underlying ``httpx.AsyncClient`` is created on first use and reused
    for later requests. Use the client as an async context manager, or call
    :meth:`aclose`, to release it; requests issued afterwards fail with
    :class:`HttpAbortError`.
    """

    def __init__(
        self,
        service: str,
        version: int,
        api_key: str,
        token_provider: TokenProvider,
        load_timeout: float = 15.0,
        *,
        api_base: str = API_BASE,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            service: The service to access, for example "youtube"
            version: The REST API version, for example 3
            api_key: API key used for requests not requiring authorization
            token_provider: Source of OAuth 2.0 tokens for authorized requests
            load_timeout: Deadline in seconds for each request, from sending
                it until the whole response body has arrived
            api_base: Root URL of the Google REST API
            transport: Custom httpx transport (tests, proxies)
        """
        self._base_url = f"{api_base}{service}/v{version}/"
        self._api_key = api_key
        self._token_provider = token_provider
        self._load_timeout = load_timeout
        self._transport = transport

        self._client: httpx.AsyncClient | None = None
        self._closed = False

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP connection pool; the client can't be used afterwards."""
        self._closed = True
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def list(
        self, path: str, parameters: Mapping[str, Any], authorized: bool = False
    ) -> Any:
        """Retrieve the entity or entities at ``path`` matching ``parameters``."""
        return await self._prepare_and_send_request("GET", path, parameters, authorized)

    async def insert(self, path: str, data: Any, authorized: bool = False) -> Any:
        """Create a new entity at ``path`` from the JSON-encodable ``data``."""
        return await self._prepare_and_send_request("POST", path, data, authorized)

    async def update(self, path: str, data: Any, authorized: bool = False) -> Any:
        """Replace the entity at ``path`` with the JSON-encodable ``data``."""
        return await self._prepare_and_send_request("PUT", path, data, authorized)

    async def delete(
        self, path: str, parameters: Mapping[str, Any], authorized: bool = False
    ) -> Any:
        """Delete the entity identified by ``path`` and ``parameters``."""
        return await self._prepare_and_send_request("DELETE", path, parameters, authorized)

    def _build_url(self, method: str, path: str, data: Any, authorized: bool) -> str:
        url = self._base_url + path
        separator = QUERY_PARAMETERS_SEPARATOR if "?" in url else "?"

        if not authorized:
            url += f"{separator}key={_encode_component(self._api_key)}"
            separator = QUERY_PARAMETERS_SEPARATOR

        if method in QUERY_METHODS and data:
            query = encode_query_data(data)
            if query:
                url += separator + query
        return url

    async def _prepare_and_send_request(
        self, method: str, path: str, data: Any, authorized: bool
    ) -> Any:
        headers: dict[str, str] = {}
        if authorized:
            # OAuthError propagates untouched
            token = await self._token_provider.generate()
            headers["Authorization"] = f"Bearer {token}"

        body = None
        if method not in QUERY_METHODS:
            headers["Content-Type"] = "application/json"
            body = data

        url = self._build_url(method, path, data, authorized)
        client = self._get_client()
        request = client.build_request(method, url, headers=headers, json=body)
        return await self._send_request(client, request)

    def _get_client(self) -> httpx.AsyncClient:
        if self._closed:
            raise HttpAbortError("The client has been closed")
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._load_timeout, transport=self._transport
            )
        return self._client

    async def _send_request(self, client: httpx.AsyncClient, request: httpx.Request) -> Any:
        logger.debug(f"{request.method} {request.url.copy_remove_param('key')}")
        try:
            # The httpx timeout only bounds each read or write, not the exchange
            async with asyncio.timeout(self._load_timeout):
                response = await client.send(request)
        except (httpx.TimeoutException, TimeoutError) as e:
            logger.warning(f"{request.method} {request.url.path} timed out")
            raise HttpTimeoutError(self._load_timeout, request=request) from e
        except httpx.TransportError as e:
            logger.warning(f"{request.method} {request.url.path} failed: {e!r}")
            raise HttpNetworkError(f"A network error has occurred: {e}", request=request) from e
        except RuntimeError as e:
            # httpx refuses to send once its own client has been closed
            if client.is_closed:
                raise HttpAbortError(request=request) from e
            raise

        return self._process_response(response)

    @staticmethod
    def _process_response(response: httpx.Response) -> Any:
        if response.status_code != 200:
            error = GoogleApiError(response)
            logger.warning(str(error))
            raise error

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Unparsable response body from {response.request.url.path}")
            raise HttpBodyParseError(response, e) from e

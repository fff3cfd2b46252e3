"""Per-flow execution context.

A context is the scratch space shared by the steps of one flow run:
named variables, an optional bearer token and the HTTP client used to
issue requests. A fresh context is created for each flow run and is
discarded when the run ends.
"""

import logging
from typing import TYPE_CHECKING, Any, Self

from krepko.core.response import Response

if TYPE_CHECKING:
    import httpx

if TYPE_CHECKING:
    from krepko.values import RuntimeValue

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    'Content-Type': 'application/json',
}


class Context:
    """Execution context of a single flow run."""

    def __init__(self, base_url: str, client: 'httpx.AsyncClient') -> None:
        """Initialize a context.

        Args:
            base_url: Base URL prepended to request paths.
            client: HTTP client owned by the flow run.
        """
        self.base_url = base_url.rstrip('/')
        self.client = client

        self._storage: dict[str, RuntimeValue] = {}
        self._token: str | None = None

    @property
    def vars(self) -> dict[str, 'RuntimeValue']:
        """Return a copy of the stored variables."""
        return dict(self._storage)

    @property
    def token(self) -> str | None:
        """Return the current bearer token."""
        return self._token

    def get_var(self, key: str, default: 'RuntimeValue' = None) -> 'RuntimeValue':
        """Read a variable stored by a previous step."""
        return self._storage.get(key, default)

    def set_var(self, key: str, value: 'RuntimeValue') -> None:
        """Store a variable for later steps of the same flow."""
        self._storage[key] = value

    set = set_var

    def bearer(self, token: str) -> Self:
        """Authorize subsequent requests with a bearer token."""
        self._token = token
        return self

    def clear_auth(self) -> Self:
        """Drop the bearer token."""
        self._token = None
        return self

    def build_url(self, path: str) -> str:
        """Join the base URL and a request path."""
        if not path.startswith('/'):
            path = f'/{path}'

        return f'{self.base_url}{path}'

    def build_headers(self, headers: dict[str, str] | None = None) -> dict[str, str]:
        """Merge default, caller and authorization headers."""
        merged = {**DEFAULT_HEADERS, **(headers or {})}
        if self._token:
            merged['Authorization'] = f'Bearer {self._token}'

        return merged

    async def request(self, method: str, path: str, *,
                      body: Any = None,  # noqa: ANN401
                      headers: dict[str, str] | None = None) -> Response:
        """Perform an HTTP request.

        A JSON body is sent only when provided and the method is not GET.

        Args:
            method: HTTP method.
            path: Request path relative to the base URL.
            body: Optional JSON-serializable request body.
            headers: Optional extra headers.

        Returns:
            Wrapped response.

        Raises:
            httpx.HTTPError: On transport failures.
        """
        method = method.upper()
        url = self.build_url(path)

        payload = None
        if body is not None and method != 'GET':
            payload = body

        logger.debug('%s %s', method, url)

        response = await self.client.request(
            method,
            url,
            json=payload,
            headers=self.build_headers(headers),
        )

        logger.debug('%s %s -> %d', method, url, response.status_code)

        return Response.from_httpx(response)

    async def get(self, path: str, headers: dict[str, str] | None = None) -> Response:
        """Perform a GET request."""
        return await self.request('GET', path, headers=headers)

    async def post(self, path: str, body: Any = None,  # noqa: ANN401
                   headers: dict[str, str] | None = None) -> Response:
        """Perform a POST request."""
        return await self.request('POST', path, body=body, headers=headers)

    async def put(self, path: str, body: Any = None,  # noqa: ANN401
                  headers: dict[str, str] | None = None) -> Response:
        """Perform a PUT request."""
        return await self.request('PUT', path, body=body, headers=headers)

    async def patch(self, path: str, body: Any = None,  # noqa: ANN401
                    headers: dict[str, str] | None = None) -> Response:
        """Perform a PATCH request."""
        return await self.request('PATCH', path, body=body, headers=headers)

    async def delete(self, path: str, headers: dict[str, str] | None = None) -> Response:
        """Perform a DELETE request."""
        return await self.request('DELETE', path, headers=headers)

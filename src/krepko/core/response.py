"""HTTP response wrapper with contract assertions.

A `Response` is what step authors receive from context requests. Its
assertion methods delegate to the pure matcher and convert a mismatch
into a raised `ContractViolation` only at this boundary.
"""

from typing import TYPE_CHECKING, Self

from krepko.errors import BodyMismatchError, StatusMismatchError

from .matcher import match_body, match_status

if TYPE_CHECKING:
    import httpx

if TYPE_CHECKING:
    from krepko.values import RuntimeValue

JSON_CONTENT_TYPE = 'application/json'


class Response:
    """Received HTTP response.

    Attributes:
        status: HTTP status code.
        headers: Response headers.
        body: Parsed body: decoded JSON when the content type indicates
            JSON, raw text otherwise.
    """

    def __init__(self, status: int, body: 'RuntimeValue' = None, *,
                 headers: 'httpx.Headers | dict[str, str] | None' = None) -> None:
        """Initialize a response.

        Args:
            status: HTTP status code.
            body: Parsed response body.
            headers: Response headers.
        """
        self.status = status
        self.body = body
        self.headers = headers if headers is not None else {}

    def __repr__(self) -> str:
        """String representation."""
        return f'<Response [{self.status}]>'

    @classmethod
    def from_httpx(cls, response: 'httpx.Response') -> Self:
        """Wrap an `httpx` response and parse its body.

        Empty payloads are kept as an empty string even when the content
        type announces JSON.

        Args:
            response: Response returned by the HTTP client.

        Returns:
            Wrapped response.

        Raises:
            ValueError: If the payload announced as JSON is malformed.
        """
        content_type = response.headers.get('content-type', '')

        body: RuntimeValue = response.text
        if JSON_CONTENT_TYPE in content_type and response.content:
            body = response.json()

        return cls(response.status_code, body, headers=response.headers)

    def expect_status(self, expected: int) -> Self:
        """Assert the response status code.

        Args:
            expected: Expected HTTP status code.

        Returns:
            The response itself, for chaining.

        Raises:
            StatusMismatchError: If the status differs.
        """
        if mismatch := match_status(self.status, expected):
            raise StatusMismatchError(
                mismatch.message,
                expected=expected,
                received=self.status,
                body=self.body,
            )

        return self

    def expect_body(self, pattern: 'RuntimeValue', *, depth: int | None = None) -> Self:
        """Assert the response body partially matches a pattern.

        Args:
            pattern: Pattern literal, possibly mixed with `expect` tokens.
            depth: Optional depth limit; deeper subtrees are accepted.

        Returns:
            The response itself, for chaining.

        Raises:
            BodyMismatchError: If the body does not match the pattern.
            TypeError: If the pattern literal is invalid.
        """
        if mismatch := match_body(self.body, pattern, depth=depth):
            raise BodyMismatchError.from_mismatch(mismatch)

        return self

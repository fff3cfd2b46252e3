"""Tests configurations and fixtures."""

from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from krepko.core.registry import FlowRegistry
from krepko.schema import FlowResult, StepResult


class Recorder:
    """Mock HTTP transport routing requests to canned responses.

    Routes map `(method, path)` to a handler receiving the request.
    Every handled request is recorded.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, *,
            json: object = None, text: str | None = None,
            handler: Callable[[httpx.Request], httpx.Response] | None = None) -> 'Recorder':
        """Register a canned response."""
        if handler is None:
            if text is not None:
                response = httpx.Response(status, text=text)
            else:
                response = httpx.Response(status, json=json)

            def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
                return response

        self.routes[method.upper(), path] = handler
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={'error': 'not found'})

        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        """Return a transport dispatching to this recorder."""
        return httpx.MockTransport(self)


@pytest.fixture
def recorder() -> Recorder:
    """Provide an empty mock HTTP router."""
    return Recorder()


@pytest.fixture
def registry() -> FlowRegistry:
    """Provide an empty registry with a default base URL."""
    return FlowRegistry('http://api.test')


@pytest.fixture
def make_result() -> Callable[..., FlowResult]:
    """Provide a factory of flow results for policy tests."""
    def make(name: str = 'flow', *, passed: bool = True,
             is_draft: bool = False, steps: int = 1) -> FlowResult:
        return FlowResult(
            name=name,
            steps=tuple(
                StepResult(name=f'step {index}', passed=passed or index < steps - 1, duration=0.01)
                for index in range(steps)
            ),
            passed=passed,
            duration=0.01 * steps,
            is_draft=is_draft,
        )

    return make

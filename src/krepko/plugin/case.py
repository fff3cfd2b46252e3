"""Pytest item executing a single flow."""

import asyncio
from typing import TYPE_CHECKING

import pytest

from krepko.names import Mode

if TYPE_CHECKING:
    from typing import Any

if TYPE_CHECKING:
    from krepko.core.flow import Flow
    from krepko.schema import FlowResult


def check_result(result: 'FlowResult', mode: Mode) -> None:
    """Translate a flow result into a pytest outcome.

    Mirrors the run exit-code policy:
    - a failed flow re-raises the error of its failing step;
    - a failed draft is an expected failure unless the mode is strict;
    - in strict mode a passing draft fails until it is promoted.

    Args:
        result: Result of a flow run.
        mode: Run mode.

    Raises:
        Exception: Error of the failing step.
    """
    strict = mode is Mode.STRICT

    if not result.passed:
        if result.is_draft and not strict:
            pytest.xfail(result.draft_reason or f'Draft flow {result.name!r} failed')

        if (step := result.failed_step) and step.error is not None:
            raise step.error

        pytest.fail(f'Flow {result.name!r} failed')

    if result.is_draft and strict:
        pytest.fail(f'Draft flow {result.name!r} passed and must be promoted')


class FlowItem(pytest.Item):
    """Pytest item running one flow against the configured API."""

    def __init__(self, *, flow: 'Flow', mode: Mode, **kwargs: 'Any') -> None:
        """Initialize a pytest item backed by a flow.

        Args:
            flow: Flow to execute.
            mode: Run mode.
            **kwargs: Keyword pytest.Item arguments.
        """
        super().__init__(**kwargs)

        self.flow = flow
        self.mode = mode

    def runtest(self) -> None:
        """Execute the flow."""
        result = asyncio.run(self.flow.run())
        check_result(result, self.mode)

    def reportinfo(self) -> tuple['Any', int | None, str]:
        """Report location of the flow."""
        return self.path, None, f'flow: {self.name}'

"""Sequential flow runner and exit-code policy.

The runner selects flows by tag, executes them one at a time and
reduces their results to a `RunSummary`. The exit-code policy lives in
the pure `compute_exit_code` function so it can be reused by callers
that collect results on their own, such as the pytest plugin.
"""

import logging
from collections.abc import Iterable
from time import perf_counter
from typing import TYPE_CHECKING

from krepko.names import Mode, validate_tags
from krepko.schema.results import FlowResult, RunSummary

if TYPE_CHECKING:
    import httpx

if TYPE_CHECKING:
    from .flow import Flow

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def compute_exit_code(results: Iterable[FlowResult], mode: Mode) -> int:
    """Reduce flow results to a process exit code.

    Precedence, highest first:
    - any failed non-draft flow fails the run in every mode;
    - in `strict` mode, any failed draft fails the run;
    - in `strict` mode, any draft at all fails the run;
    - otherwise the run succeeds.

    Args:
        results: Results of the executed flows.
        mode: Run mode.

    Returns:
        `0` on success, `1` otherwise.
    """
    results = tuple(results)

    if any(not result.passed and not result.is_draft for result in results):
        return EXIT_FAILURE

    if mode is Mode.STRICT:
        if any(not result.passed and result.is_draft for result in results):
            return EXIT_FAILURE

        if any(result.is_draft for result in results):
            return EXIT_FAILURE

    return EXIT_SUCCESS


class Runner:
    """Executes selected flows and summarizes the run."""

    def __init__(self, mode: Mode = Mode.CI, tags: Iterable[str] | None = None, *,
                 transport: 'httpx.AsyncBaseTransport | None' = None) -> None:
        """Initialize a runner.

        Args:
            mode: Run mode applied to the exit code.
            tags: Tags to select; empty or `None` selects every flow.
            transport: Optional HTTP transport passed to every flow.

        Raises:
            ValidationError: If `tags` is a string or holds an invalid tag.
        """
        self.mode = Mode(mode)
        self.tags = frozenset(validate_tags(tags))
        self.transport = transport

        self.flows: list[Flow] = []

    def add_flow(self, flow: 'Flow') -> None:
        """Add a flow to the run."""
        self.flows.append(flow)

    def add_flows(self, flows: Iterable['Flow']) -> None:
        """Add several flows to the run, preserving their order."""
        self.flows.extend(flows)

    def should_run(self, flow: 'Flow') -> bool:
        """Check whether a flow is selected.

        A flow is selected when no tags are requested or when it carries
        at least one of the requested tags.
        """
        if not self.tags:
            return True

        return not self.tags.isdisjoint(flow.flow_tags)

    def selected(self) -> list['Flow']:
        """Return the selected flows in registration order."""
        return [
            flow
            for flow in self.flows
            if self.should_run(flow)
        ]

    async def run(self) -> RunSummary:
        """Execute the selected flows sequentially.

        Returns:
            Summary of the run including its exit code.
        """
        started = perf_counter()
        results: list[FlowResult] = []

        passed = failed = draft = 0

        for flow in self.selected():
            result = await flow.run(transport=self.transport)
            results.append(result)

            if result.is_draft:
                draft += 1
            elif not result.passed:
                failed += 1
            else:
                passed += 1

        exit_code = compute_exit_code(results, self.mode)

        logger.info(
            'Run finished: %d passed, %d failed, %d draft (exit code %d)',
            passed, failed, draft, exit_code,
        )

        return RunSummary(
            flows=tuple(results),
            passed=passed,
            failed=failed,
            draft=draft,
            total_duration=perf_counter() - started,
            exit_code=exit_code,
            mode=self.mode,
        )

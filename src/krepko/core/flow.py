"""Flow declaration and execution.

A flow is an ordered list of named steps sharing one execution context.
Flows are declared with chained builder calls and executed with `run`:

    flow = (
        Flow('Login', 'http://localhost:3000')
        .tags(['auth'])
        .do('Authenticate', authenticate)
        .do('Read profile', read_profile)
    )

Execution is strictly sequential. The first step that raises stops the
flow; the error is recorded in a failing step result and never
propagates past the flow.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from inspect import isawaitable
from time import perf_counter
from typing import TYPE_CHECKING, Self

import httpx
from pydantic import Field

from krepko.context import Context
from krepko.errors import KrepkoError
from krepko.models import SchemaModel
from krepko.names import FlowName, validate_tags  # noqa: TC001
from krepko.schema.results import FlowResult, FlowState, StepResult

if TYPE_CHECKING:
    from krepko.values import RuntimeValue

logger = logging.getLogger(__name__)

#: Step unit of work. Receives the flow context; may be a coroutine function.
type StepCallback = Callable[[Context], Awaitable['RuntimeValue'] | 'RuntimeValue']


class Step(SchemaModel):
    """Named unit of work within a flow."""

    name: FlowName = Field(
        title='Step name',
        description='Name shown in reports.',
    )

    callback: Callable[..., object] = Field(
        title='Step callback',
        description='Callable receiving the flow context.',
    )

    async def __call__(self, context: Context) -> None:
        """Run the step against a context."""
        result = self.callback(context)
        if isawaitable(result):
            await result


class Flow:
    """Ordered, named sequence of steps.

    Flows are mutated only while being declared. `run` never modifies
    the flow, so a flow may be run several times.
    """

    def __init__(self, name: str, base_url: str) -> None:
        """Initialize a flow.

        Args:
            name: Flow name shown in reports.
            base_url: Base URL for requests issued by the steps.
        """
        self.name = name
        self.base_url = base_url

        self.steps: list[Step] = []
        self.flow_tags: tuple[str, ...] = ()
        self.draft = False
        self.draft_reason: str | None = None

    def __repr__(self) -> str:
        """String representation."""
        return f'<Flow {self.name!r} steps={len(self.steps)}>'

    def do(self, name: str, callback: StepCallback) -> Self:
        """Append a step.

        Args:
            name: Step name.
            callback: Unit of work receiving the context.

        Returns:
            The flow itself, for chaining.
        """
        self.steps.append(Step(name=name, callback=callback))
        return self

    def tags(self, tags: Iterable[str]) -> Self:
        """Replace the flow tags used for run selection.

        Raises:
            ValidationError: If `tags` is a string or holds an invalid tag.
        """
        self.flow_tags = validate_tags(tags)
        return self

    def is_draft(self, reason: str | None = None) -> Self:
        """Mark the flow as a draft.

        Draft failures do not fail `dev` and `ci` runs; in `strict` mode
        any draft fails the run until it is promoted.

        Args:
            reason: Optional explanation shown in reports.

        Returns:
            The flow itself, for chaining.
        """
        self.draft = True
        self.draft_reason = reason
        return self

    async def run_step(self, step: Step, context: Context) -> StepResult:
        """Execute a single step and record its outcome.

        Args:
            step: Step to execute.
            context: Flow context.

        Returns:
            Passing result, or failing result carrying the raised error.
        """
        started = perf_counter()
        error: Exception | None = None

        try:
            await step(context)

        except Exception as base:  # noqa: BLE001
            error = base
            if isinstance(base, KrepkoError):
                base.locate(flow=self.name, step=step.name)

            logger.debug('Step %r of flow %r failed: %r', step.name, self.name, base)

        return StepResult(
            name=step.name,
            passed=error is None,
            duration=perf_counter() - started,
            error=error,
        )

    async def run(self, *, transport: httpx.AsyncBaseTransport | None = None) -> FlowResult:
        """Execute the flow against a fresh context.

        Args:
            transport: Optional HTTP transport, for example a mock.

        Returns:
            Flow result with one entry per executed step.
        """
        started = perf_counter()
        results: list[StepResult] = []
        state = FlowState.PENDING

        logger.debug('Flow %r is %s', self.name, state)

        async with httpx.AsyncClient(transport=transport, timeout=None) as client:
            context = Context(self.base_url, client)

            for step in self.steps:
                state = FlowState.RUNNING
                logger.debug('Flow %r is %s step %r', self.name, state, step.name)

                result = await self.run_step(step, context)
                results.append(result)

                if not result.passed:
                    state = FlowState.STEP_FAILED
                    break
            else:
                state = FlowState.COMPLETED

        passed = state is FlowState.COMPLETED and all(
            result.passed
            for result in results
        )

        logger.info('Flow %r %s', self.name, 'passed' if passed else 'failed')

        return FlowResult(
            name=self.name,
            steps=tuple(results),
            passed=passed,
            duration=perf_counter() - started,
            is_draft=self.draft,
            draft_reason=self.draft_reason,
            tags=self.flow_tags,
            state=state,
        )

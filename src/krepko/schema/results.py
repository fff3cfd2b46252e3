"""Write-once snapshots produced by matching and execution.

Results are immutable models: once a step, flow or run finishes,
its outcome is frozen and passed to reporters and callers as is.
"""

from enum import StrEnum
from typing import Any

from pydantic import Field

from krepko.models import SchemaModel
from krepko.names import Mode


class Mismatch(SchemaModel):
    """First violation found while matching a value against a pattern."""

    path: str = Field(
        title='Mismatch path',
        description=(
            'Dotted and bracketed key path from the body root to the '
            'violating value, or `root` for the body itself.'
        ),
        examples=['root', 'address.geo.lat', '[1]', 'items[0].id'],
    )

    expected: Any = Field(
        default=None,
        title='Expected value',
        description='Pattern, kind name or length that was expected.',
    )

    received: Any = Field(
        default=None,
        title='Received value',
        description='Actual value found at the path.',
    )

    message: str = Field(
        title='Message',
        description='Human-readable description of the violation.',
    )


class FlowState(StrEnum):
    """States of a flow run.

    A run starts `pending`, enters `running` for each step and ends
    either `completed` (every step ran) or `step_failed` (a step raised
    and the remaining steps were skipped).
    """

    PENDING = 'pending'
    RUNNING = 'running'
    STEP_FAILED = 'step_failed'
    COMPLETED = 'completed'


class StepResult(SchemaModel):
    """Outcome of a single step."""

    name: str
    passed: bool
    duration: float = Field(ge=0, description='Elapsed time in seconds.')
    error: Exception | None = None


class FlowResult(SchemaModel):
    """Outcome of a single flow run."""

    name: str
    steps: tuple[StepResult, ...] = ()
    passed: bool
    duration: float = Field(ge=0, description='Elapsed time in seconds.')
    is_draft: bool = False
    draft_reason: str | None = None
    tags: tuple[str, ...] = ()
    state: FlowState = FlowState.COMPLETED

    @property
    def failed_step(self) -> StepResult | None:
        """Return the failing step, if any."""
        for step in self.steps:
            if not step.passed:
                return step

        return None


class RunSummary(SchemaModel):
    """Aggregated outcome of a run.

    A flow counts as `draft` whenever its draft flag is set, regardless
    of its outcome; otherwise it counts as `failed` or `passed`.
    """

    flows: tuple[FlowResult, ...] = ()
    passed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    draft: int = Field(default=0, ge=0)
    total_duration: float = Field(default=0.0, ge=0)
    exit_code: int = 0
    mode: Mode = Mode.CI

    @property
    def total(self) -> int:
        """Number of executed flows."""
        return self.passed + self.failed + self.draft

    @property
    def step_count(self) -> int:
        """Number of executed steps across all flows."""
        return sum(len(flow.steps) for flow in self.flows)

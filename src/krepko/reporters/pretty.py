"""Human-readable terminal reporter."""

from json import dumps
from typing import TYPE_CHECKING

from click import echo, style

from krepko.errors import ContractViolation, KrepkoError, StatusMismatchError
from krepko.schema import BasePattern
from krepko.values import UNDEFINED

if TYPE_CHECKING:
    from krepko.schema import FlowResult, RunSummary, StepResult

PASSED_MARK = '✓'
FAILED_MARK = '✗'
DRAFT_MARK = '○'

ERROR_INDENT = ' ' * 4


def format_duration(seconds: float) -> str:
    """Render a duration: milliseconds below one second, seconds above."""
    if seconds < 1:
        return f'{round(seconds * 1000)}ms'

    return f'{seconds:.2f}s'


def _plural(count: int, noun: str) -> str:
    """Render a counted noun."""
    return f'{count} {noun}{"s" if count != 1 else ""}'


def _render(value: object) -> str:
    """Render a diagnostic value."""
    if value is UNDEFINED:
        return 'undefined'

    if isinstance(value, str):
        return value

    if isinstance(value, BasePattern):
        return value.describe()

    return dumps(value, ensure_ascii=False, default=repr)


class PrettyReporter:
    """Colored terminal report of a finished run."""

    def __init__(self, base_url: str, *, color: bool | None = None) -> None:
        """Initialize a reporter.

        Args:
            base_url: Base URL, or several joined, shown in the header.
            color: Force colors on or off; detected from the terminal
                when `None`.
        """
        self.base_url = base_url
        self.color = color

    def echo(self, message: str = '') -> None:
        """Write a line to standard output."""
        echo(message, color=self.color)

    def print_header(self) -> None:
        """Print the report header."""
        self.echo()
        self.echo(style('krepko', fg='cyan', bold=True))
        self.echo(style(f'Base URL: {self.base_url}', dim=True))
        self.echo()

    def print_flow_result(self, result: 'FlowResult') -> None:
        """Print a flow with its steps."""
        title = f'Flow: {result.name}'
        if result.is_draft:
            label = 'DRAFT'
            if result.draft_reason:
                label += f': {result.draft_reason}'
            title += ' ' + style(f'[{label}]', fg='yellow')

        self.echo(style(title, bold=True))

        for step in result.steps:
            self.print_step_result(step)

        self.echo()

    def print_step_result(self, step: 'StepResult') -> None:
        """Print a step line and, for a failure, its error."""
        mark = style(PASSED_MARK, fg='green')
        if not step.passed:
            mark = style(FAILED_MARK, fg='red')

        duration = style(format_duration(step.duration), dim=True)
        self.echo(f'  {mark} {step.name}  {duration}')

        if not step.passed and step.error is not None:
            self.print_error(step.error)

    def print_error(self, error: Exception) -> None:
        """Print error details: message, expected and received values, body."""
        message = f'{type(error).__name__}: {error}'
        if isinstance(error, KrepkoError):
            message = error.message

        self.echo()
        self.echo(ERROR_INDENT + style(message, fg='red'))

        if isinstance(error, ContractViolation):
            self.echo(
                ERROR_INDENT
                + style('Expected: ', dim=True)
                + style(_render(error.expected), fg='green'),
            )
            self.echo(
                ERROR_INDENT
                + style('Received: ', dim=True)
                + style(_render(error.received), fg='red'),
            )

        if isinstance(error, StatusMismatchError) and error.body is not None:
            body = dumps(error.body, ensure_ascii=False, indent=2, default=repr)

            self.echo()
            self.echo(ERROR_INDENT + style('Response body:', dim=True))
            for line in body.splitlines():
                self.echo(ERROR_INDENT + style(line, fg='bright_black'))

        self.echo()

    def print_summary(self, summary: 'RunSummary') -> None:
        """Print counts, elapsed time and the final verdict."""
        self.echo(style('Summary:', bold=True))

        if summary.passed:
            self.echo(style(f'{PASSED_MARK} {_plural(summary.passed, "flow")} passed', fg='green'))

        if summary.failed:
            self.echo(style(f'{FAILED_MARK} {_plural(summary.failed, "flow")} failed', fg='red'))

        if summary.draft:
            self.echo(style(f'{DRAFT_MARK} {_plural(summary.draft, "draft flow")}', fg='yellow'))

        self.echo(style(
            f'Total: {_plural(summary.total, "flow")} ({_plural(summary.step_count, "step")})',
            dim=True,
        ))
        self.echo(style(f'Time: {format_duration(summary.total_duration)}', dim=True))
        self.echo()

        if summary.exit_code == 0:
            self.echo(style(f'{PASSED_MARK} All contracts hold', fg='green', bold=True))
        else:
            self.echo(style(f'{FAILED_MARK} Contract violations detected', fg='red', bold=True))

        self.echo()

    def report(self, summary: 'RunSummary') -> None:
        """Print the full report of a run."""
        self.print_header()

        for result in summary.flows:
            self.print_flow_result(result)

        self.print_summary(summary)

"""Command-line interface for running flow files.

Options fall back to `KREPKO_*` environment variables, then to
built-in defaults:

    krepko run --base-url http://localhost:8080
    krepko run --pattern 'flows/**/*.krepko.py' --tags smoke,auth
    krepko list --mode strict
"""

import asyncio
import logging
import sys
from functools import wraps
from typing import TYPE_CHECKING

from click import BadParameter, Choice, echo, group, option, style

from krepko.config import RunSettings
from krepko.core.loader import FlowLoader, discover
from krepko.core.runner import Runner
from krepko.errors import FlowLoadError
from krepko.names import Mode, parse_tags
from krepko.reporters import PrettyReporter

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any

if TYPE_CHECKING:
    from click import Context, Parameter

    from krepko.core.flow import Flow

logger = logging.getLogger('krepko')

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def _parse_tags_option(ctx: 'Context', param: 'Parameter',  # noqa: ARG001
                       value: str | None) -> tuple[str, ...]:
    """Validate the comma-separated tags option."""
    try:
        return parse_tags(value)
    except ValueError as base:
        raise BadParameter(f'{base}') from base


def selection_options(func: 'Callable[..., Any]') -> 'Callable[..., Any]':
    """Attach options shared by commands that load and select flows."""
    decorators = (
        option(
            '-b', '--base-url',
            default=None,
            help='Base URL for API requests. [env: KREPKO_BASE_URL]',
        ),
        option(
            '-p', '--pattern',
            default=None,
            help='Glob pattern for flow files. [env: KREPKO_PATTERN]',
        ),
        option(
            '-m', '--mode',
            type=Choice([mode.value for mode in Mode]),
            default=None,
            help='Run mode. [env: KREPKO_MODE]',
        ),
        option(
            '-t', '--tags',
            callback=_parse_tags_option,
            default=None,
            help='Run only flows carrying any of these comma-separated tags.',
        ),
        option(
            '--relaxed',
            is_flag=True,
            default=False,
            help='Skip flow files that fail to load instead of aborting.',
        ),
        option(
            '-v', '--verbose',
            count=True,
            help='Enable logging; repeat for debug output.',
        ),
    )

    for decorator in reversed(decorators):
        func = decorator(func)

    @wraps(func)
    def wrapper(**kwargs: 'Any') -> 'Any':
        configure_logging(kwargs.pop('verbose'))
        return func(**kwargs)

    return wrapper


def configure_logging(verbosity: int) -> None:
    """Configure root logging for the given verbosity level."""
    if not verbosity:
        return

    logging.basicConfig(
        level=logging.DEBUG if verbosity > 1 else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def make_settings(base_url: str | None, pattern: str | None, mode: str | None) -> RunSettings:
    """Merge command-line options over environment settings."""
    overrides = {
        'base_url': base_url,
        'pattern': pattern,
        'mode': mode,
    }

    return RunSettings(**{
        key: value
        for key, value in overrides.items()
        if value is not None
    })


def load_flows(settings: RunSettings, *, relaxed: bool) -> list['Flow']:
    """Discover and load flow files, exiting early when there is nothing to do."""
    files = discover(settings.pattern)
    if not files:
        echo(f'No flow files found matching pattern: {settings.pattern}')
        echo('Create a file like auth.krepko.py with your flows.')
        sys.exit(0)

    logger.info('Found %d flow files', len(files))

    loader = FlowLoader(strict=not relaxed, base_url=settings.base_url)
    try:
        flows = loader.load(files)
    except FlowLoadError as error:
        echo(style(f'{error}', fg='red'), err=True)
        sys.exit(1)

    if not flows:
        echo('No flows registered. Make sure your flow files call krepko().')
        sys.exit(0)

    return flows


@group(help='Contract-driven HTTP testing.')
def cli() -> None:
    """Root CLI group for krepko."""
    return None


@cli.command(
    name='run',
    help='Run flow files and report contract violations.',
)
@selection_options
@option(
    '--no-color',
    is_flag=True,
    default=False,
    help='Disable colored output.',
)
def run_flows(base_url: str | None, pattern: str | None, mode: str | None,
              tags: tuple[str, ...], relaxed: bool, no_color: bool) -> None:
    """Run selected flows and exit with the run exit code."""
    settings = make_settings(base_url, pattern, mode)
    flows = load_flows(settings, relaxed=relaxed)

    runner = Runner(mode=settings.mode, tags=tags)
    runner.add_flows(flows)

    summary = asyncio.run(runner.run())

    base_urls = dict.fromkeys(flow.base_url for flow in runner.selected())
    reporter = PrettyReporter(
        ', '.join(base_urls) or settings.base_url,
        color=False if no_color else None,
    )
    reporter.report(summary)

    sys.exit(summary.exit_code)


@cli.command(
    name='list',
    help='List flows selected by the given options without running them.',
)
@selection_options
def list_flows(base_url: str | None, pattern: str | None, mode: str | None,
               tags: tuple[str, ...], relaxed: bool) -> None:
    """Print selected flows with their tags and steps."""
    settings = make_settings(base_url, pattern, mode)
    flows = load_flows(settings, relaxed=relaxed)

    runner = Runner(mode=settings.mode, tags=tags)
    runner.add_flows(flows)

    for flow in runner.selected():
        count = len(flow.steps)
        line = f'{flow.name} ({count} step{"s" if count != 1 else ""})'
        if flow.flow_tags:
            line += f' [{", ".join(flow.flow_tags)}]'
        if flow.draft:
            line += ' ' + style('DRAFT', fg='yellow')
        echo(line)


if __name__ == '__main__':
    cli()

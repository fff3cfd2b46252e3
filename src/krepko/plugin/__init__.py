"""Pytest plugin collecting flow files as test items.

This module integrates krepko with pytest by:
- registering custom command-line options;
- resolving run settings once per session;
- collecting flow files as executable test items.

Files named `*.krepko.py` are collected; every selected flow becomes
a separate pytest item.
"""

from typing import TYPE_CHECKING

from krepko.config import RunSettings
from krepko.names import Mode

from .spec import FlowFile

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.config.argparsing import Parser
    from _pytest.nodes import Node

FLOW_FILE_SUFFIX = '.krepko.py'


def pytest_addoption(parser: 'Parser') -> None:
    """Register pytest command-line options for krepko.

    Args:
        parser: Pytest argument parser.
    """
    group = parser.getgroup('krepko', 'contract-driven HTTP flows')
    group.addoption(
        '--krepko-mode',
        dest='krepko_mode',
        choices=[mode.value for mode in Mode],
        default=None,
        help=(
            'Run mode for collected flows. '
            'In strict mode failing drafts fail and passing drafts must be promoted.'
        ),
    )
    group.addoption(
        '--krepko-tags',
        dest='krepko_tags',
        default=None,
        help='Collect only flows carrying any of these comma-separated tags.',
    )
    group.addoption(
        '--krepko-base-url',
        dest='krepko_base_url',
        default=None,
        help='Default base URL for flows declared without one.',
    )
    group.addoption(
        '--krepko-relaxed',
        action='store_true',
        dest='krepko_relaxed',
        default=False,
        help='Skip flow files that fail to load instead of failing collection.',
    )


def pytest_configure(config: 'Config') -> None:
    """Resolve run settings for the session.

    Command-line options override `KREPKO_*` environment variables.
    The result is attached as `config.krepko_settings`.

    Args:
        config: Pytest configuration object.
    """
    overrides = {
        'base_url': config.getoption('krepko_base_url', default=None),
        'mode': config.getoption('krepko_mode', default=None),
    }

    config.krepko_settings = RunSettings(**{  # type: ignore[attr-defined]
        key: value
        for key, value in overrides.items()
        if value is not None
    })


def is_flow_file(file_path: 'Path') -> bool:
    """Check whether a path names a flow file."""
    return file_path.name.endswith(FLOW_FILE_SUFFIX)


def pytest_collect_file(parent: 'Node', file_path: 'Path') -> FlowFile | None:
    """Collect flow files.

    Args:
        parent: Parent pytest collection node.
        file_path: Path to the file being considered.

    Returns:
        A `FlowFile` collector if the file is a flow file, otherwise `None`.
    """
    if is_flow_file(file_path):
        return FlowFile.from_parent(
            parent,
            path=file_path,
        )

    return None

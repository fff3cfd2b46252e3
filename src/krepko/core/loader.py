"""Flow file discovery and loading.

Flow files are regular Python modules, by default named `*.krepko.py`.
Each file is executed as an isolated module while a registry is active,
so every flow it declares through `krepko()` lands in that registry.

Loading is strict by default: a file that fails to import aborts the
load with `FlowLoadError`. In relaxed mode the file is skipped with
a `FlowWarning` and the flows it declared before failing are dropped.
"""

import logging
import sys
from collections.abc import Iterable
from importlib.util import module_from_spec, spec_from_file_location
from itertools import count
from pathlib import Path
from re import sub
from typing import TYPE_CHECKING
from warnings import warn

from krepko.errors import FlowLoadError, FlowWarning

from .registry import FlowRegistry

if TYPE_CHECKING:
    from .flow import Flow

logger = logging.getLogger(__name__)

#: Directories never searched for flow files.
IGNORED_DIRECTORIES = frozenset({
    '.git',
    '.venv',
    'venv',
    '__pycache__',
    'node_modules',
    'build',
    'dist',
})

MODULE_PREFIX = '_krepko_flows'

#: Characters that make a path segment a glob.
GLOB_CHARACTERS = frozenset('*?[')

_modules_counter = count()


def split_pattern(pattern: str) -> tuple[Path | None, str]:
    """Split an absolute glob pattern into a directory and a relative glob.

    The directory is made of the leading segments without glob
    characters. Relative patterns are returned unchanged.

    Args:
        pattern: Glob pattern.

    Returns:
        The fixed directory (`None` for relative patterns) and the
        pattern relative to it.
    """
    path = Path(pattern)
    if not path.is_absolute():
        return None, pattern

    parts = path.parts

    index = 1
    while index < len(parts) - 1 and not GLOB_CHARACTERS.intersection(parts[index]):
        index += 1

    return Path(*parts[:index]), '/'.join(parts[index:])


def discover(pattern: str, root: Path | str | None = None) -> list[Path]:
    """Find flow files matching a recursive glob pattern.

    Args:
        pattern: Glob pattern, for example `**/*.krepko.py`. Relative
            patterns are resolved against the root; absolute patterns
            ignore it.
        root: Directory to search; the current directory by default.

    Returns:
        Sorted absolute paths of matching files.
    """
    anchor, pattern = split_pattern(pattern)
    base = Path(anchor or root or Path.cwd()).resolve()

    files = []
    for path in base.glob(pattern):
        if not path.is_file():
            continue

        parts = path.relative_to(base).parts[:-1]
        if IGNORED_DIRECTORIES.intersection(parts):
            continue

        files.append(path)

    return sorted(files)


class FlowLoader:
    """Loads flow files into registries.

    Attributes:
        strict: Raise on the first broken file instead of skipping it.
        base_url: Default base URL for flows declared without one.
    """

    def __init__(self, strict: bool = True, base_url: str | None = None) -> None:
        """Initialize a loader.

        Args:
            strict: Raise on the first broken file instead of skipping it.
            base_url: Default base URL for flows declared without one.
        """
        self.strict = strict
        self.base_url = base_url

    @staticmethod
    def make_module_name(path: Path) -> str:
        """Build a unique module name for a flow file."""
        stem = sub(r'\W', '_', path.name.removesuffix('.py'))
        return f'{MODULE_PREFIX}_{stem}_{next(_modules_counter)}'

    def execute(self, path: Path) -> None:
        """Execute a flow file as a standalone module.

        The directory of the file is importable while it runs, so flow
        files may import helper modules placed next to them.

        Raises:
            ImportError: If the file can not be imported.
        """
        name = self.make_module_name(path)

        spec = spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f'Can not import {path}')

        module = module_from_spec(spec)

        directory = f'{path.resolve().parent}'

        sys.path.insert(0, directory)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        finally:
            sys.modules.pop(name, None)
            sys.path.remove(directory)

    def load_file(self, path: Path | str, registry: FlowRegistry) -> list['Flow']:
        """Load flows declared by a single file.

        Args:
            path: Flow file.
            registry: Registry receiving the declared flows.

        Returns:
            Flows declared by the file.

        Raises:
            FlowLoadError: If the file fails to load in strict mode.
        """
        path = Path(path)
        known = len(registry)

        logger.debug('Loading flows from %s', path)

        try:
            with registry.activate():
                self.execute(path)

        except Exception as base:
            del registry.flows[known:]

            error = FlowLoadError(f'Failed to load flows: {base!r}', path=path)
            if self.strict:
                raise error from base

            warn(FlowWarning(f'{error}'), stacklevel=2)
            return []

        return registry.flows[known:]

    def load(self, paths: Iterable[Path | str]) -> list['Flow']:
        """Load flows declared by several files.

        Args:
            paths: Flow files, loaded in the given order.

        Returns:
            Declared flows in declaration order.

        Raises:
            FlowLoadError: If a file fails to load in strict mode.
        """
        registry = FlowRegistry(self.base_url)

        for path in paths:
            self.load_file(path, registry)

        return list(registry)

"""Pytest collector for flow files.

Each collected file is loaded into its own registry; every declared
flow that passes the tag selection becomes a `FlowItem`.
"""

from typing import TYPE_CHECKING

import pytest

from krepko.core.loader import FlowLoader
from krepko.core.runner import Runner
from krepko.names import parse_tags

from .case import FlowItem

if TYPE_CHECKING:
    from collections.abc import Iterable


class FlowFile(pytest.File):
    """Pytest file collector for flow files."""

    def collect(self) -> 'Iterable[FlowItem]':
        """Load the file and yield an item per selected flow.

        Returns:
            Iterable of `FlowItem` instances for pytest execution.

        Raises:
            FlowLoadError: If the file fails to load and relaxed loading
                is disabled.
        """
        settings = self.config.krepko_settings  # type: ignore[attr-defined]

        loader = FlowLoader(
            strict=not self.config.getoption('krepko_relaxed', default=False),
            base_url=settings.base_url,
        )

        runner = Runner(
            mode=settings.mode,
            tags=parse_tags(self.config.getoption('krepko_tags', default=None)),
        )
        runner.add_flows(loader.load([self.path]))

        for flow in runner.selected():
            yield FlowItem.from_parent(
                self,
                name=flow.name,
                flow=flow,
                mode=runner.mode,
            )

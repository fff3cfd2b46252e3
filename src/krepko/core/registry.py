"""Flow registry and declaration surface.

Flows are collected in an explicit `FlowRegistry`. Flow files declare
flows through `krepko()` without having to pass the registry around:
the loader activates a registry for the duration of a file and every
flow declared meanwhile is registered into it.

    from krepko import expect, krepko

    api = krepko('http://localhost:3000')

    api.flow('Health').do('Ping', ping)
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from warnings import warn

from krepko.errors import ConfigurationError, FlowWarning

from .flow import Flow

_ACTIVE_REGISTRY: ContextVar['FlowRegistry | None'] = ContextVar(
    'krepko_active_registry',
    default=None,
)


class FlowRegistry:
    """Ordered collection of declared flows.

    Attributes:
        base_url: Default base URL for declarations without one.
    """

    def __init__(self, base_url: str | None = None) -> None:
        """Initialize an empty registry.

        Args:
            base_url: Default base URL for declarations without one.
        """
        self.base_url = base_url
        self.flows: list[Flow] = []

    def __iter__(self) -> Iterator[Flow]:
        """Iterate over flows in declaration order."""
        return iter(self.flows)

    def __len__(self) -> int:
        """Number of registered flows."""
        return len(self.flows)

    def register(self, flow: Flow) -> Flow:
        """Add a flow to the registry.

        A name collision does not replace the existing flow; both are
        kept and a warning is emitted.

        Args:
            flow: Flow to register.

        Returns:
            The registered flow.
        """
        if any(item.name == flow.name for item in self.flows):
            warn(FlowWarning(f'Flow {flow.name!r} is already registered'), stacklevel=2)

        self.flows.append(flow)
        return flow

    @contextmanager
    def activate(self) -> Iterator['FlowRegistry']:
        """Make this registry the target of `krepko()` within a scope."""
        token = _ACTIVE_REGISTRY.set(self)
        try:
            yield self
        finally:
            _ACTIVE_REGISTRY.reset(token)


def active_registry() -> FlowRegistry | None:
    """Return the registry activated for the current scope, if any."""
    return _ACTIVE_REGISTRY.get()


class Krepko:
    """Flow factory bound to a base URL and a registry."""

    def __init__(self, base_url: str, registry: FlowRegistry | None = None) -> None:
        """Initialize a factory.

        Args:
            base_url: Base URL of the API under test.
            registry: Registry receiving declared flows, if any.
        """
        self.base_url = base_url
        self.registry = registry

    def __repr__(self) -> str:
        """String representation."""
        return f'<Krepko {self.base_url!r}>'

    def flow(self, name: str) -> Flow:
        """Declare a new flow.

        Args:
            name: Flow name.

        Returns:
            The new flow, registered when a registry is bound.
        """
        flow = Flow(name, self.base_url)
        if self.registry is not None:
            self.registry.register(flow)

        return flow


def krepko(base_url: str | None = None, *, registry: FlowRegistry | None = None) -> Krepko:
    """Create a flow factory.

    Args:
        base_url: Base URL of the API under test. Falls back to the
            registry's default base URL.
        registry: Registry receiving declared flows. Falls back to the
            active registry.

    Returns:
        Flow factory.

    Raises:
        ConfigurationError: If no base URL is given or configured.
    """
    if registry is None:
        registry = active_registry()

    if base_url is None and registry is not None:
        base_url = registry.base_url

    if not base_url:
        raise ConfigurationError('Base URL is required: pass it to krepko() or configure a default')

    return Krepko(base_url, registry)

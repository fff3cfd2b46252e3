"""Core contract matching and flow execution.

This package holds the pure matcher engine, the response wrapper
exposing contract assertions, and the flow, runner, registry and
loader layers built on top of them.

Only the leaf modules are re-exported here; import flows, runners
and registries from their own modules.
"""

from .matcher import match, match_body, match_status
from .response import Response

__all__ = (
    'Response',
    'match',
    'match_body',
    'match_status',
)

"""Run reporters.

Reporters consume a finished `RunSummary` and render it; they never
observe a run while it is in progress.
"""

from .pretty import PrettyReporter, format_duration

__all__ = (
    'PrettyReporter',
    'format_duration',
)

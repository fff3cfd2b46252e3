"""Contract-driven HTTP testing.

The `krepko` package lets you declare named flows of ordered steps
that issue HTTP requests and assert response contracts:
- status codes, compared strictly;
- response bodies, matched partially against pattern trees built from
  plain literals and `expect` tokens.

Flows are collected in an explicit registry, executed sequentially by
a runner, and reduced to one exit code according to the run mode.
They can be run from the `krepko` command line or collected by pytest.
"""

from .context import Context
from .core.flow import Flow, Step
from .core.registry import FlowRegistry, Krepko, krepko
from .core.response import Response
from .core.runner import Runner, compute_exit_code
from .errors import (
    BodyMismatchError,
    ConfigurationError,
    ContractViolation,
    FlowLoadError,
    FlowWarning,
    KrepkoError,
    StatusMismatchError,
)
from .names import Mode
from .schema import FlowResult, RunSummary, StepResult, expect

__all__ = (
    'BodyMismatchError',
    'ConfigurationError',
    'Context',
    'ContractViolation',
    'Flow',
    'FlowLoadError',
    'FlowRegistry',
    'FlowResult',
    'FlowWarning',
    'Krepko',
    'KrepkoError',
    'Mode',
    'Response',
    'RunSummary',
    'Runner',
    'Step',
    'StatusMismatchError',
    'StepResult',
    'compute_exit_code',
    'expect',
    'krepko',
)

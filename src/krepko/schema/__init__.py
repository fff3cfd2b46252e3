"""Declarative data model: patterns and run results.

Defines the closed pattern union consumed by body assertions and the
immutable result snapshots produced by flow and run execution.
"""

from .patterns import (
    ArrayContainingPattern,
    ArrayOfPattern,
    BasePattern,
    ExactPattern,
    Expect,
    NestedPattern,
    OrderedPattern,
    Pattern,
    PatternKind,
    TypePattern,
    Wildcard,
    compile_pattern,
    expect,
)
from .results import FlowResult, FlowState, Mismatch, RunSummary, StepResult

__all__ = (
    'ArrayContainingPattern',
    'ArrayOfPattern',
    'BasePattern',
    'ExactPattern',
    'Expect',
    'FlowResult',
    'FlowState',
    'Mismatch',
    'NestedPattern',
    'OrderedPattern',
    'Pattern',
    'PatternKind',
    'RunSummary',
    'StepResult',
    'TypePattern',
    'Wildcard',
    'compile_pattern',
    'expect',
)

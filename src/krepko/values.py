"""Core value classification for response bodies and patterns.

Response bodies are JSON trees without a fixed schema. This module maps
any body value onto a closed set of kinds so that matching can dispatch
on a discriminant instead of ad-hoc type checks.

It also defines `UNDEFINED`, a sentinel for "no value at all" (for example,
a key missing from an object), which is distinct from JSON `null`.
"""

from collections.abc import Mapping
from enum import StrEnum
from typing import Any, Final

#: A value in runtime represents any Python object received from
#: an HTTP client, user-defined code, or JSON decoders.
type RuntimeValue = Any

MAPPINGS = (Mapping,)
NUMBERS = (int, float)
SCALARS = (str, int, float, bool)
SEQUENCES = (list, tuple)


class UndefinedType:
    """Type of the `UNDEFINED` singleton.

    Represents the absence of a value. Unlike `None`, which is a regular
    JSON `null`, an undefined value never satisfies a wildcard.
    """

    _instance: 'UndefinedType | None' = None

    def __new__(cls) -> 'UndefinedType':
        """Return the single shared instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)

        return cls._instance

    def __bool__(self) -> bool:
        """Undefined is always falsy."""
        return False

    def __repr__(self) -> str:
        """String representation."""
        return 'undefined'


UNDEFINED: Final = UndefinedType()


class ValueKind(StrEnum):
    """Closed set of value categories observable in a response body."""

    UNDEFINED = 'undefined'
    NULL = 'null'
    BOOLEAN = 'boolean'
    NUMBER = 'number'
    STRING = 'string'
    ARRAY = 'array'
    OBJECT = 'object'


def kind_of(value: RuntimeValue) -> ValueKind:
    """Classify a runtime value.

    Booleans are checked before numbers because `bool` is a subclass
    of `int` in Python, but never a number in JSON.

    Args:
        value: Value to classify.

    Returns:
        The kind of the value.

    Raises:
        TypeError: If the value has no JSON counterpart.
    """
    if value is UNDEFINED:
        return ValueKind.UNDEFINED

    if value is None:
        return ValueKind.NULL

    if isinstance(value, bool):
        return ValueKind.BOOLEAN

    if isinstance(value, NUMBERS):
        return ValueKind.NUMBER

    if isinstance(value, str):
        return ValueKind.STRING

    if isinstance(value, SEQUENCES):
        return ValueKind.ARRAY

    if isinstance(value, MAPPINGS):
        return ValueKind.OBJECT

    raise TypeError(f'{value!r} has unsupported type')


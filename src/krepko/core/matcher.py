"""Structural contract matching.

This module implements partial matching of response bodies against
pattern trees. Matching is a pure function: it performs no I/O, holds
no state and never raises on a violation. Instead, it returns the first
`Mismatch` found while walking the pattern in declaration order, or
`None` if the value satisfies the pattern.

Matching rules:
- exact values require the same kind and an equal value;
- typed wildcards check only the kind (or definedness for `any`);
- object patterns are partial: unlisted keys are ignored, listed keys
  must exist even if their pattern is a wildcard;
- ordered array patterns match a prefix of the actual array;
- `array_of` requires every element to match the item pattern;
- `array_containing` requires each item to be matched by at least one
  element, and one element may satisfy several items.

Descending into an object value, an array element or an array matcher
item increases the depth by one. Subtrees deeper than `max_depth` are
accepted without inspection.
"""

from collections.abc import Callable
from json import dumps
from typing import TYPE_CHECKING

from krepko.schema.patterns import PatternKind, compile_pattern
from krepko.schema.results import Mismatch
from krepko.values import UNDEFINED, ValueKind, kind_of

if TYPE_CHECKING:
    from krepko.schema.patterns import (
        ArrayContainingPattern,
        ArrayOfPattern,
        ExactPattern,
        NestedPattern,
        OrderedPattern,
        Pattern,
        TypePattern,
    )
    from krepko.values import RuntimeValue

ROOT_PATH = 'root'

type Matcher = Callable[['RuntimeValue', 'Pattern', str, int, int | None], Mismatch | None]


def format_value(value: 'RuntimeValue') -> str:
    """Render a value for a mismatch message.

    Args:
        value: Value to render.

    Returns:
        JSON form of the value, `undefined` for the undefined sentinel,
        or `repr` for values without a JSON form.
    """
    if value is UNDEFINED:
        return 'undefined'

    try:
        return dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


def _key_path(path: str, key: str) -> str:
    """Extend a path with an object key."""
    return f'{path}.{key}' if path else key


def _index_path(path: str, index: int) -> str:
    """Extend a path with an array index."""
    return f'{path}[{index}]'


def _mismatch(path: str, message: str, *,
              expected: 'RuntimeValue', received: 'RuntimeValue') -> Mismatch:
    """Build a mismatch anchored at a path."""
    location = path or ROOT_PATH

    return Mismatch(
        path=location,
        expected=expected,
        received=received,
        message=f'Body mismatch at "{location}": {message}',
    )


def _expect_array(actual: 'RuntimeValue', path: str) -> Mismatch | None:
    """Require the actual value to be an array."""
    kind = kind_of(actual)
    if kind is ValueKind.ARRAY:
        return None

    return _mismatch(
        path,
        f'expected array, received {kind}',
        expected='array',
        received=actual,
    )


def _match_exact(actual: 'RuntimeValue', pattern: 'ExactPattern', path: str,
                 depth: int, max_depth: int | None) -> Mismatch | None:  # noqa: ARG001
    """Match a primitive with strict equality."""
    if kind_of(actual) is kind_of(pattern.value) and actual == pattern.value:
        return None

    return _mismatch(
        path,
        f'expected {format_value(pattern.value)}, received {format_value(actual)}',
        expected=pattern.value,
        received=actual,
    )


def _match_type(actual: 'RuntimeValue', pattern: 'TypePattern', path: str,
                depth: int, max_depth: int | None) -> Mismatch | None:  # noqa: ARG001
    """Match a typed wildcard."""
    if pattern.type.accepts(actual):
        return None

    return _mismatch(
        path,
        f'expected {pattern.describe()}, received {format_value(actual)}',
        expected=pattern,
        received=actual,
    )


def _match_nested(actual: 'RuntimeValue', pattern: 'NestedPattern', path: str,
                  depth: int, max_depth: int | None) -> Mismatch | None:
    """Match an object partially, key by key."""
    kind = kind_of(actual)
    if kind is not ValueKind.OBJECT:
        return _mismatch(
            path,
            f'expected object, received {kind}',
            expected='object',
            received=actual,
        )

    for key, item in pattern.entries.items():
        key_path = _key_path(path, key)

        if key not in actual:
            return _mismatch(
                key_path,
                'key not found in actual object',
                expected=item,
                received=UNDEFINED,
            )

        if mismatch := match(actual[key], item, key_path, depth + 1, max_depth):
            return mismatch

    return None


def _match_ordered(actual: 'RuntimeValue', pattern: 'OrderedPattern', path: str,
                   depth: int, max_depth: int | None) -> Mismatch | None:
    """Match leading array elements positionally."""
    if mismatch := _expect_array(actual, path):
        return mismatch

    if len(actual) < len(pattern.items):
        return _mismatch(
            path,
            (
                f'expected array with at least {len(pattern.items)} elements, '
                f'received {len(actual)}'
            ),
            expected=len(pattern.items),
            received=len(actual),
        )

    for index, item in enumerate(pattern.items):
        item_path = _index_path(path, index)
        if mismatch := match(actual[index], item, item_path, depth + 1, max_depth):
            return mismatch

    return None


def _match_array_of(actual: 'RuntimeValue', pattern: 'ArrayOfPattern', path: str,
                    depth: int, max_depth: int | None) -> Mismatch | None:
    """Match every array element against one item pattern."""
    if mismatch := _expect_array(actual, path):
        return mismatch

    for index, element in enumerate(actual):
        item_path = _index_path(path, index)
        if mismatch := match(element, pattern.item, item_path, depth + 1, max_depth):
            return mismatch

    return None


def _match_array_containing(actual: 'RuntimeValue', pattern: 'ArrayContainingPattern',
                            path: str, depth: int, max_depth: int | None) -> Mismatch | None:
    """Match each item against any array element."""
    if mismatch := _expect_array(actual, path):
        return mismatch

    for index, item in enumerate(pattern.items):
        found = any(
            match(element, item, '', depth + 1, max_depth) is None
            for element in actual
        )
        if not found:
            return _mismatch(
                path,
                f'array does not contain expected item at index {index}',
                expected=item,
                received=actual,
            )

    return None


MATCHERS: dict[PatternKind, Matcher] = {
    PatternKind.EXACT: _match_exact,
    PatternKind.TYPE: _match_type,
    PatternKind.NESTED: _match_nested,
    PatternKind.ORDERED: _match_ordered,
    PatternKind.ARRAY_OF: _match_array_of,
    PatternKind.ARRAY_CONTAINING: _match_array_containing,
}


def match(actual: 'RuntimeValue', pattern: 'Pattern', path: str = '',
          depth: int = 0, max_depth: int | None = None) -> Mismatch | None:
    """Match an actual value against a compiled pattern.

    Args:
        actual: Value to check, usually a parsed response body.
        pattern: Compiled pattern.
        path: Path of the value from the body root.
        depth: Current depth of traversal.
        max_depth: Depth limit; `None` means unlimited.

    Returns:
        The first mismatch in pattern declaration order, or `None`
        if the value satisfies the pattern.
    """
    if max_depth is not None and depth > max_depth:
        return None

    return MATCHERS[pattern.kind](actual, pattern, path, depth, max_depth)


def match_body(actual: 'RuntimeValue', pattern: 'RuntimeValue',
               depth: int | None = None) -> Mismatch | None:
    """Compile a pattern literal and match a body against it.

    Args:
        actual: Parsed response body.
        pattern: Pattern literal or compiled pattern.
        depth: Optional depth limit.

    Returns:
        The first mismatch, or `None`.

    Raises:
        TypeError: If the pattern literal is invalid.
    """
    return match(actual, compile_pattern(pattern), max_depth=depth)


def match_status(actual: int, expected: int) -> Mismatch | None:
    """Match an HTTP status code with strict equality.

    Args:
        actual: Received status code.
        expected: Expected status code.

    Returns:
        A mismatch anchored at `status`, or `None`.
    """
    if actual == expected:
        return None

    return Mismatch(
        path='status',
        expected=expected,
        received=actual,
        message=f'Expected status {expected}, received {actual}',
    )

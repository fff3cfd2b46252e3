"""Tests for pattern compilation and expect tokens."""

import pytest
from pydantic import ValidationError

from krepko.schema import (
    ArrayContainingPattern,
    ArrayOfPattern,
    ExactPattern,
    NestedPattern,
    OrderedPattern,
    PatternKind,
    TypePattern,
    Wildcard,
    compile_pattern,
    expect,
)
from krepko.values import UNDEFINED


@pytest.mark.parametrize('value', (
    pytest.param(None, id='null'),
    pytest.param(True, id='boolean'),
    pytest.param(1, id='int'),
    pytest.param(1.5, id='float'),
    pytest.param('text', id='string'),
))
def test_compile_primitive(value: object) -> None:
    """Primitives compile to exact patterns keeping their type."""
    pattern = compile_pattern(value)

    assert isinstance(pattern, ExactPattern)
    assert pattern.kind is PatternKind.EXACT
    assert pattern.value == value
    assert type(pattern.value) is type(value)


def test_compile_tree() -> None:
    """Mappings and lists compile recursively."""
    pattern = compile_pattern({
        'id': expect.number,
        'tags': ['a', expect.string],
        'owner': {'name': 'Alice'},
    })

    assert isinstance(pattern, NestedPattern)
    assert list(pattern.entries) == ['id', 'tags', 'owner']
    assert pattern.entries['id'] == expect.number

    tags = pattern.entries['tags']
    assert isinstance(tags, OrderedPattern)
    assert tags.items == (ExactPattern(value='a'), expect.string)

    owner = pattern.entries['owner']
    assert isinstance(owner, NestedPattern)
    assert owner.entries == {'name': ExactPattern(value='Alice')}


def test_compile_passes_compiled_patterns() -> None:
    """Compiled patterns are returned unchanged."""
    pattern = expect.array_of({'id': 1})

    assert compile_pattern(pattern) is pattern


@pytest.mark.parametrize('value, message', (
    pytest.param(UNDEFINED, 'undefined', id='undefined'),
    pytest.param({1: 'a'}, 'mapping key', id='non string key'),
    pytest.param({'a': {2, 3}}, 'unsupported type', id='nested set'),
))
def test_compile_invalid(value: object, message: str) -> None:
    """Reject literals that can not be patterns."""
    with pytest.raises(TypeError, match=message):
        compile_pattern(value)


@pytest.mark.parametrize('token, wildcard', (
    pytest.param(expect.any, Wildcard.ANY, id='any'),
    pytest.param(expect.string, Wildcard.STRING, id='string'),
    pytest.param(expect.number, Wildcard.NUMBER, id='number'),
    pytest.param(expect.boolean, Wildcard.BOOLEAN, id='boolean'),
    pytest.param(expect.array, Wildcard.ARRAY, id='array'),
    pytest.param(expect.object, Wildcard.OBJECT, id='object'),
))
def test_expect_wildcards(token: TypePattern, wildcard: Wildcard) -> None:
    """Wildcard tokens are typed patterns."""
    assert isinstance(token, TypePattern)
    assert token.kind is PatternKind.TYPE
    assert token.type is wildcard
    assert token.describe() == f'expect.{wildcard}'


def test_expect_array_matchers() -> None:
    """Array matchers compile their item patterns."""
    array_of = expect.array_of({'id': expect.number})
    assert isinstance(array_of, ArrayOfPattern)
    assert isinstance(array_of.item, NestedPattern)

    containing = expect.array_containing([1, {'id': 2}])
    assert isinstance(containing, ArrayContainingPattern)
    assert containing.items[0] == ExactPattern(value=1)
    assert isinstance(containing.items[1], NestedPattern)


def test_patterns_are_frozen() -> None:
    """Patterns can not be modified after creation."""
    pattern = compile_pattern({'id': 1})

    with pytest.raises(ValidationError):
        pattern.entries = {}  # type: ignore[misc]


@pytest.mark.parametrize('pattern, expected', (
    pytest.param(compile_pattern('a'), '"a"', id='exact'),
    pytest.param(compile_pattern({'id': expect.number}), '{"id": expect.number}', id='nested'),
    pytest.param(compile_pattern([1, None]), '[1, null]', id='ordered'),
    pytest.param(expect.array_of(expect.string), 'expect.array_of(expect.string)', id='array of'),
    pytest.param(
        expect.array_containing([True]),
        'expect.array_containing([true])',
        id='array containing',
    ),
))
def test_describe(pattern: object, expected: str) -> None:
    """Patterns render a short token form."""
    assert pattern.describe() == expected  # type: ignore[attr-defined]


@pytest.mark.parametrize('wildcard, value, expected', (
    pytest.param(Wildcard.ANY, None, True, id='any null'),
    pytest.param(Wildcard.ANY, UNDEFINED, False, id='any undefined'),
    pytest.param(Wildcard.NUMBER, True, False, id='number boolean'),
    pytest.param(Wildcard.NUMBER, 2.5, True, id='number float'),
    pytest.param(Wildcard.ARRAY, (), True, id='array tuple'),
    pytest.param(Wildcard.OBJECT, [], False, id='object list'),
))
def test_wildcard_accepts(wildcard: Wildcard, value: object, expected: bool) -> None:
    """Wildcards check the value kind."""
    assert wildcard.accepts(value) is expected

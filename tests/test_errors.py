"""Tests for error formatting."""

from pathlib import Path

import pytest

from krepko.errors import (
    BodyMismatchError,
    ConfigurationError,
    ErrorContext,
    ErrorFormatter,
    FlowLoadError,
    KrepkoError,
    StatusMismatchError,
)
from krepko.schema import Mismatch, expect
from krepko.values import UNDEFINED


def test_plain_message() -> None:
    """Errors without context render their message only."""
    error = ConfigurationError('Base URL is required')

    assert str(error) == 'Base URL is required'
    assert error.message == 'Base URL is required'
    assert isinstance(error, KrepkoError)


def test_location() -> None:
    """Location lines describe file, flow and step."""
    message = ErrorFormatter.format('Failure', ErrorContext(
        filename='users.krepko.py',
        flow='Users',
        step='List',
    ))

    lines = message.splitlines()

    assert lines[0] == 'Failure'
    assert lines[1] == '    in "users.krepko.py"'
    assert lines[2] == '    on flow "Users", step "List"'


def test_locate_replaces_location() -> None:
    """Locating an error twice keeps the latest flow and step."""
    error = ConfigurationError('Failure', context=ErrorContext(filename='users.krepko.py'))

    assert error.locate(flow='Inner', step='Fetch') is error

    error.locate(flow='Outer', step='Delegate')

    assert error.context == {
        'filename': 'users.krepko.py',
        'flow': 'Outer',
        'step': 'Delegate',
    }
    assert 'on flow "Outer", step "Delegate"' in str(error)


def test_flow_load_error() -> None:
    """Load errors point at the flow file."""
    error = FlowLoadError('Failed to load flows', path=Path('flows/users.krepko.py'))

    assert error.path == Path('flows/users.krepko.py')
    assert 'in "flows/users.krepko.py"' in str(error)


def test_status_snippet() -> None:
    """Status errors render expected, received and body as YAML."""
    error = StatusMismatchError(
        'Expected status 200, received 404',
        expected=200,
        received=404,
        body={'error': 'not found'},
    )

    text = str(error)

    assert text.startswith('Expected status 200, received 404')
    assert '        expected: 200' in text
    assert '        received: 404' in text
    assert '          error: not found' in text


def test_body_from_mismatch() -> None:
    """Body errors carry the matcher result and render tokens."""
    error = BodyMismatchError.from_mismatch(Mismatch(
        path='id',
        expected=expect.number,
        received=UNDEFINED,
        message='Body mismatch at "id": key not found in actual object',
    ))

    assert error.path == 'id'
    assert error.expected == expect.number
    assert error.received is UNDEFINED

    text = str(error)

    assert 'expected: expect.number' in text
    assert 'received: <undefined>' in text


@pytest.mark.parametrize('value, expected', (
    pytest.param(None, None, id='null'),
    pytest.param(1.5, 1.5, id='number'),
    pytest.param((1, 'a'), [1, 'a'], id='tuple'),
    pytest.param({1: object()}, {'1': '<runtime object>'}, id='runtime object'),
    pytest.param([expect.array_of(expect.string)], ['expect.array_of(expect.string)'], id='token'),
))
def test_filter_unsafe(value: object, expected: object) -> None:
    """Snippet values are reduced to YAML-safe data."""
    assert ErrorFormatter._filter_unsafe(value) == expected  # noqa: SLF001

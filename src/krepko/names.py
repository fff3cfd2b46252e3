"""Primitive names and validation rules.

This module defines run modes and strongly-typed aliases used to
validate flow names and tags declared by flow files and passed
on the command line.
"""

from collections.abc import Iterable  # noqa: TC003
from enum import StrEnum
from re import compile as regexp
from typing import Annotated

from pydantic import Field, TypeAdapter

#: Tags are short identifiers: letters, digits, underscores, dashes and dots.
_TAG_PATTERN = r'[A-Za-z0-9_][A-Za-z0-9_.\-]*'

#: Compiled pattern for tag identifiers.
TAG_PATTERN = regexp(rf'^{_TAG_PATTERN}$')


class Mode(StrEnum):
    """Run mode controlling how draft flows affect the exit code.

    - `dev` and `ci`: only non-draft failures fail the run;
    - `strict`: draft failures and even passing drafts fail the run.
    """

    DEV = 'dev'
    CI = 'ci'
    STRICT = 'strict'


Tag = Annotated[
    str, Field(
        pattern=rf'^{_TAG_PATTERN}$',
        title='Flow tag',
        description=(
            'Label used to select flows for a run. '
            'A flow is selected when any of its tags is requested.'
        ),
        examples=[
            'smoke',
            'auth',
            'critical',
        ],
    ),
]

#: Validator shared by flow declarations and run selection.
TAGS_ADAPTER = TypeAdapter(tuple[Tag, ...])

FlowName = Annotated[
    str, Field(
        min_length=1,
        title='Flow name',
        description='Human-readable name of a flow or a step.',
    ),
]


def parse_tags(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated tag list.

    Args:
        value: Raw option value, for example `smoke, auth`.

    Returns:
        Tuple of non-empty, stripped tags in declaration order.

    Raises:
        ValueError: If any tag is not a valid identifier.
    """
    if not value:
        return ()

    tags = tuple(
        tag.strip()
        for tag in value.split(',')
        if tag.strip()
    )

    for tag in tags:
        if not TAG_PATTERN.match(tag):
            raise ValueError(f'Invalid tag {tag!r}')

    return tags


def validate_tags(tags: Iterable[str] | None) -> tuple[str, ...]:
    """Validate flow tags.

    A bare string is rejected rather than split into characters.

    Args:
        tags: Iterable of tags, or `None` for no tags.

    Returns:
        Tuple of tags in the given order.

    Raises:
        ValidationError: If the value is a string or any tag is invalid.
    """
    if tags is None:
        return ()

    return TAGS_ADAPTER.validate_python(tags)

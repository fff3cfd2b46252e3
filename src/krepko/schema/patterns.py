"""Pattern tree used by body assertions.

A pattern describes the expected shape of a response body. It is a
closed tagged union: each variant carries a `kind` discriminator, and
the matcher dispatches on it rather than on object identity.

Patterns are usually written as plain Python literals mixed with
`expect` tokens and compiled with `compile_pattern`:

    {'id': expect.number, 'tags': expect.array_of(expect.string)}

Tokens are model instances, so values decoded from JSON can never be
mistaken for a wildcard or an array matcher.
"""

from collections.abc import Iterable  # noqa: TC003
from enum import StrEnum
from json import dumps
from typing import Literal

from pydantic import Field

from krepko.models import SchemaModel
from krepko.values import RuntimeValue, ValueKind, kind_of


class PatternKind(StrEnum):
    """Discriminator of pattern variants."""

    EXACT = 'exact'
    TYPE = 'type'
    NESTED = 'nested'
    ORDERED = 'ordered'
    ARRAY_OF = 'array_of'
    ARRAY_CONTAINING = 'array_containing'


class Wildcard(StrEnum):
    """Typed wildcards.

    Every wildcard except `any` names the value kind it accepts.
    """

    ANY = 'any'
    STRING = 'string'
    NUMBER = 'number'
    BOOLEAN = 'boolean'
    ARRAY = 'array'
    OBJECT = 'object'

    def accepts(self, value: RuntimeValue) -> bool:
        """Check whether a value satisfies the wildcard.

        Args:
            value: Actual value.

        Returns:
            True if the value is defined (for `any`) or has the
            required kind.
        """
        kind = kind_of(value)
        if self is Wildcard.ANY:
            return kind is not ValueKind.UNDEFINED

        return kind is ValueKind(self.value)


class BasePattern(SchemaModel):
    """Base class for all pattern variants.

    Concrete variants declare a literal `kind` discriminator field.
    """

    def describe(self) -> str:
        """Return a short human-readable form of the pattern."""
        raise NotImplementedError  # pragma: no cover


class ExactPattern(BasePattern):
    """Primitive value that must be strictly equal to the actual value."""

    kind: Literal[PatternKind.EXACT] = PatternKind.EXACT

    value: str | int | float | bool | None = Field(
        title='Expected value',
        description='JSON primitive the actual value must be equal to.',
    )

    def describe(self) -> str:
        """Return the JSON form of the expected value."""
        return dumps(self.value)


class TypePattern(BasePattern):
    """Typed wildcard checking only the kind of the actual value."""

    kind: Literal[PatternKind.TYPE] = PatternKind.TYPE

    type: Wildcard = Field(
        title='Wildcard type',
        description='Kind of value accepted by the wildcard.',
    )

    def describe(self) -> str:
        """Return the token name, for example `expect.string`."""
        return f'expect.{self.type}'


class NestedPattern(BasePattern):
    """Partial object pattern.

    Only listed keys are checked, in declaration order. Keys present in
    the actual object but absent from the pattern are ignored.
    """

    kind: Literal[PatternKind.NESTED] = PatternKind.NESTED

    entries: dict[str, 'Pattern'] = Field(
        default_factory=dict,
        title='Object entries',
        description='Mapping of required keys to their sub-patterns.',
    )

    def describe(self) -> str:
        """Return an object-like form of the pattern."""
        entries = ', '.join(
            f'{dumps(key)}: {value.describe()}'
            for key, value in self.entries.items()
        )
        return f'{{{entries}}}'


class OrderedPattern(BasePattern):
    """Positional pattern matched against a prefix of the actual array."""

    kind: Literal[PatternKind.ORDERED] = PatternKind.ORDERED

    items: tuple['Pattern', ...] = Field(
        default=(),
        title='Ordered items',
        description='Sub-patterns matched against leading array elements.',
    )

    def describe(self) -> str:
        """Return an array-like form of the pattern."""
        return f'[{', '.join(item.describe() for item in self.items)}]'


class ArrayOfPattern(BasePattern):
    """Pattern requiring every array element to match one item pattern."""

    kind: Literal[PatternKind.ARRAY_OF] = PatternKind.ARRAY_OF

    item: 'Pattern' = Field(
        title='Item pattern',
        description='Pattern every element of the actual array must match.',
    )

    def describe(self) -> str:
        """Return the token form of the pattern."""
        return f'expect.array_of({self.item.describe()})'


class ArrayContainingPattern(BasePattern):
    """Pattern requiring each item to be matched by some array element.

    Matching is existential per item: one actual element may satisfy
    several items.
    """

    kind: Literal[PatternKind.ARRAY_CONTAINING] = PatternKind.ARRAY_CONTAINING

    items: tuple['Pattern', ...] = Field(
        default=(),
        title='Contained items',
        description='Sub-patterns that must each be matched by an element.',
    )

    def describe(self) -> str:
        """Return the token form of the pattern."""
        items = ', '.join(item.describe() for item in self.items)
        return f'expect.array_containing([{items}])'


#: Closed union of all pattern variants.
type Pattern = (
    ExactPattern
    | TypePattern
    | NestedPattern
    | OrderedPattern
    | ArrayOfPattern
    | ArrayContainingPattern
)

for _model in (NestedPattern, OrderedPattern, ArrayOfPattern, ArrayContainingPattern):
    _model.model_rebuild()


def _normalize_key(value: RuntimeValue) -> str:
    """Validate a pattern mapping key.

    Args:
        value: Candidate mapping key.

    Returns:
        The validated key as a string.

    Raises:
        TypeError: If the provided key is not a string.
    """
    if not isinstance(value, str):
        raise TypeError(f'Can not use {value!r} as mapping key')

    return value


def compile_pattern(value: RuntimeValue) -> Pattern:
    """Compile a user-written pattern tree.

    Already compiled patterns (including `expect` tokens) are returned
    unchanged. Mappings become nested object patterns, lists and tuples
    become ordered array patterns, and primitives become exact values.

    Args:
        value: Pattern literal.

    Returns:
        Compiled pattern.

    Raises:
        TypeError: If the literal contains unsupported values or
            non-string mapping keys.
    """
    if isinstance(value, BasePattern):
        return value  # type: ignore[return-value]

    kind = kind_of(value)

    if kind is ValueKind.UNDEFINED:
        raise TypeError('Can not use undefined as a pattern')

    if kind is ValueKind.ARRAY:
        return OrderedPattern(items=tuple(
            compile_pattern(item)
            for item in value
        ))

    if kind is ValueKind.OBJECT:
        return NestedPattern(entries={
            _normalize_key(key): compile_pattern(item)
            for key, item in value.items()
        })

    return ExactPattern(value=value)


class Expect:
    """Construction surface for wildcards and array matchers."""

    any = TypePattern(type=Wildcard.ANY)
    string = TypePattern(type=Wildcard.STRING)
    number = TypePattern(type=Wildcard.NUMBER)
    boolean = TypePattern(type=Wildcard.BOOLEAN)
    array = TypePattern(type=Wildcard.ARRAY)
    object = TypePattern(type=Wildcard.OBJECT)

    @staticmethod
    def array_of(item: RuntimeValue) -> ArrayOfPattern:
        """Match arrays whose every element matches `item`."""
        return ArrayOfPattern(item=compile_pattern(item))

    @staticmethod
    def array_containing(items: Iterable[RuntimeValue]) -> ArrayContainingPattern:
        """Match arrays containing an element for each of `items`."""
        return ArrayContainingPattern(items=tuple(
            compile_pattern(item)
            for item in items
        ))


expect = Expect()

"""Validation constraints derived from schema facets.

A :class:`Constraints` value pairs the required/nullable decision for a
field with an ordered list of ``validate`` tag tokens (``required``,
``omitempty``, ``min=3``, ``gt=5`` ...). The decision depends both on the
schema itself and on whether the *parent* object lists the field as
required.
"""

import dataclasses
from decimal import Decimal

from gopherapi.openapi.models import Schema

__all__ = ['Constraints', 'new_constraints', 'format_go_float']

_NON_STRING_FORMATS = ('date-time', 'date', 'uuid')


@dataclasses.dataclass(frozen=True)
class Constraints:
    """Required-ness, nullability and validation tokens of a field or type.

    ``None`` means "not declared" for every facet, which keeps an explicit
    ``0`` apart from an absent bound.
    """

    required: bool | None = None
    nullable: bool | None = None
    read_only: bool | None = None
    write_only: bool | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    min: float | None = None
    max: float | None = None
    min_items: int | None = None
    max_items: int | None = None
    min_properties: int | None = None
    max_properties: int | None = None
    validation_tags: tuple[str, ...] = ()

    def count(self) -> int:
        """Number of constraints carried, used to pick the stricter of two union variants."""
        facets = (
            self.min_length,
            self.max_length,
            self.pattern,
            self.min,
            self.max,
            self.min_items,
            self.max_items,
            self.min_properties,
            self.max_properties,
        )
        return sum(1 for facet in facets if facet is not None) + len(
            self.validation_tags
        )

    def is_equal(self, other: 'Constraints') -> bool:
        return self == other

    def with_nullable(self, nullable: bool) -> 'Constraints':
        return dataclasses.replace(self, nullable=nullable)


def format_go_float(value: float) -> str:
    """Format a float the way Go's ``%g`` verb does.

    The shortest representation that round-trips is used; the exponent form
    kicks in below ``1e-4`` and from ``1e6`` on.

    Example:
        >>> format_go_float(2.5)
        '2.5'
        >>> format_go_float(1000000.0)
        '1e+06'
    """
    if value == 0:
        return '0'

    digits = Decimal(repr(float(value))).normalize()
    sign, mantissa_digits, exponent = digits.as_tuple()
    mantissa = ''.join(str(d) for d in mantissa_digits)
    decimal_exponent = len(mantissa) + exponent - 1
    prefix = '-' if sign else ''

    if decimal_exponent < -4 or decimal_exponent >= 6:
        head = mantissa[0]
        tail = mantissa[1:]
        body = f'{head}.{tail}' if tail else head
        exp_sign = '-' if decimal_exponent < 0 else '+'
        return f'{prefix}{body}e{exp_sign}{abs(decimal_exponent):02d}'

    if decimal_exponent < 0:
        return f'{prefix}0.{"0" * (-decimal_exponent - 1)}{mantissa}'

    int_len = decimal_exponent + 1
    if len(mantissa) <= int_len:
        return f'{prefix}{mantissa}{"0" * (int_len - len(mantissa))}'
    return f'{prefix}{mantissa[:int_len]}.{mantissa[int_len:]}'


def _bound_token(
    inclusive_tag: str,
    exclusive_tag: str,
    bound: float | None,
    exclusive: bool | float | None,
    is_int: bool,
) -> tuple[float | None, str | None]:
    tag = inclusive_tag
    value = bound

    # The numeric form carries its own bound and wins over the legacy flag.
    if isinstance(exclusive, bool):
        if exclusive and bound is not None:
            tag = exclusive_tag
    elif exclusive is not None:
        tag = exclusive_tag
        value = exclusive

    if value is None:
        return None, None

    if is_int:
        return value, f'{tag}={int(value)}'
    return value, f'{tag}={format_go_float(value)}'


def _sort_key(token: str) -> tuple[int, str]:
    if token == 'required':
        return 0, token
    if token == 'omitempty':
        return 1, token
    return 2, token


def new_constraints(
    schema: Schema | None,
    required: bool = False,
    has_nil_type: bool = False,
) -> Constraints:
    """Compute the constraints of a schema used as a field.

    Args:
        schema: The resolved schema of the field, or ``None``.
        required: Whether the parent object lists the field as required.
        has_nil_type: Whether the field's type list includes ``null``.

    Returns:
        The canonical constraints; tokens are ordered ``required``,
        ``omitempty``, then lexicographically.
    """
    if schema is None:
        return Constraints()

    types = schema.types
    is_int = 'integer' in types
    is_float = 'number' in types
    is_boolean = 'boolean' in types
    is_string = 'string' in types
    has_non_string_format = is_string and schema.format in _NON_STRING_FORMATS
    is_array = 'array' in types
    is_object = schema.type is None or 'object' in types

    # Read-only fields never appear in requests, write-only ones never in responses.
    if required and schema.readOnly:
        required = False
    if required and schema.writeOnly:
        required = False

    nullable = not required or has_nil_type or bool(schema.nullable)

    if required and is_boolean:
        required = False
        nullable = has_nil_type

    if required and is_string and schema.maxLength == 0:
        required = False

    if required and is_object:
        required = False
        if has_nil_type:
            nullable = True

    tags = []
    if required:
        tags.append('required')
    elif nullable:
        tags.append('omitempty')

    min_value = max_value = None
    if is_int or is_float:
        min_value, token = _bound_token(
            'gte', 'gt', schema.minimum, schema.exclusiveMinimum, is_int
        )
        if token:
            tags.append(token)
        max_value, token = _bound_token(
            'lte', 'lt', schema.maximum, schema.exclusiveMaximum, is_int
        )
        if token:
            tags.append(token)

    min_length = max_length = None
    if (is_string or is_array) and not has_non_string_format:
        if schema.minLength is not None:
            min_length = schema.minLength
            tags.append(f'min={min_length}')
        if schema.maxLength is not None:
            max_length = schema.maxLength
            tags.append(f'max={max_length}')

    if tags == ['omitempty']:
        tags = []

    return Constraints(
        required=required,
        nullable=nullable,
        read_only=schema.readOnly,
        write_only=schema.writeOnly,
        min_length=min_length,
        max_length=max_length,
        pattern=schema.pattern or None,
        min=min_value,
        max=max_value,
        min_items=schema.minItems,
        max_items=schema.maxItems,
        min_properties=schema.minProperties,
        max_properties=schema.maxProperties,
        validation_tags=tuple(sorted(tags, key=_sort_key)),
    )

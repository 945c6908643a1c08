"""Descriptors produced by schema resolution.

This module provides:
- GoSchema, the resolved type descriptor of a single schema node
- Property, UnionElement and Discriminator, the parts of object and union descriptors
- TypeDefinition, a named top-level Go type
- SpecLocation, the document section a type definition comes from

Descriptors are frozen dataclasses: a descriptor stored inside a type
definition must never change when the caller later derives a new
descriptor from it, so every change goes through :func:`dataclasses.replace`.
"""

import dataclasses
from enum import Enum
from typing import Any

from gopherapi.codegen.constraints import Constraints
from gopherapi.codegen.extensions import SensitiveDataConfig
from gopherapi.codegen.naming import schema_name_to_type_name, uppercase_first_character
from gopherapi.openapi.models import Schema

__all__ = [
    'GO_PRIMITIVE_TYPES',
    'Discriminator',
    'ErrorPathField',
    'GoSchema',
    'Property',
    'SpecLocation',
    'TypeDefinition',
    'UnionElement',
    'has_sensitive_data',
    'is_primitive_type',
    'needs_marshaler',
    'parse_error_path',
    'resolve_error_path',
]

GO_PRIMITIVE_TYPES = frozenset(
    [
        'string', 'int', 'int8', 'int16', 'int32', 'int64',
        'uint', 'uint8', 'uint16', 'uint32', 'uint64',
        'float', 'float32', 'float64', 'bool', 'time.Time',
    ]
)  # fmt: skip


def is_primitive_type(type_decl: str) -> bool:
    return type_decl in GO_PRIMITIVE_TYPES


class SpecLocation(str, Enum):
    """Where in the document a type definition was declared."""

    PATH = 'path'
    QUERY = 'query'
    HEADER = 'header'
    COOKIE = 'cookie'
    BODY = 'body'
    RESPONSE = 'response'
    SCHEMA = 'schema'
    UNION = 'union'


@dataclasses.dataclass(frozen=True)
class Discriminator:
    """Discriminator of a union.

    Attributes:
        property: JSON property holding the discriminator value.
        mapping: Discriminator value mapped to the Go type of the variant.
    """

    property: str
    mapping: dict[str, str] = dataclasses.field(default_factory=dict)

    def json_tag(self) -> str:
        return f'`json:"{self.property}"`'

    @property
    def property_name(self) -> str:
        return schema_name_to_type_name(self.property)


@dataclasses.dataclass(frozen=True)
class UnionElement:
    """One variant of a union: its rendered type name and full descriptor."""

    type_name: str
    schema: 'GoSchema'

    def __str__(self) -> str:
        return self.type_name

    def method(self) -> str:
        """Suffix of the ``As<X>``/``From<X>`` accessors of this variant."""
        return ''.join(uppercase_first_character(p) for p in self.type_name.split('.'))


@dataclasses.dataclass(frozen=True)
class GoSchema:
    """Resolved type descriptor of one schema node.

    A descriptor is either a reference (``ref_type`` set) to another named
    type or a definition whose ``go_type`` is the rendered Go type: a
    primitive, ``[]T``, ``map[string]T`` or a ``struct {...}`` literal.

    Attributes:
        go_type: Rendered Go type of the definition.
        ref_type: Name of the referenced type, if this is a reference.
        array_type: Descriptor of the array element.
        enum_values: Enum constant name mapped to its literal, in declaration order.
        properties: Fields of an object.
        has_additional_properties: Whether the struct carries an AdditionalProperties map.
        additional_properties_type: Descriptor of the map value.
        additional_types: Named types spawned while building this descriptor.
        skip_optional_pointer: Render optional fields without a pointer.
        description: Schema description.
        constraints: Constraints of the node itself.
        union_elements: Variants of a union.
        discriminator: Discriminator of a union.
        is_union_wrapper: Whether this is a struct wrapped around a union.
        define_via_alias: Declare as ``type X = Y`` rather than ``type X Y``.
        is_primitive_alias: Alias of a primitive component.
        openapi_schema: The schema node this descriptor was built from.
    """

    go_type: str = ''
    ref_type: str = ''
    array_type: 'GoSchema | None' = None
    enum_values: dict[str, str] = dataclasses.field(default_factory=dict)
    properties: list['Property'] = dataclasses.field(default_factory=list)
    has_additional_properties: bool = False
    additional_properties_type: 'GoSchema | None' = None
    additional_types: list['TypeDefinition'] = dataclasses.field(default_factory=list)
    skip_optional_pointer: bool = False
    description: str = ''
    constraints: Constraints = dataclasses.field(default_factory=Constraints)
    union_elements: list[UnionElement] = dataclasses.field(default_factory=list)
    discriminator: Discriminator | None = None
    is_union_wrapper: bool = False
    define_via_alias: bool = False
    is_primitive_alias: bool = False
    openapi_schema: Schema | None = dataclasses.field(default=None, compare=False)

    @property
    def is_ref(self) -> bool:
        return bool(self.ref_type)

    @property
    def is_external_ref(self) -> bool:
        return self.is_ref and '.' in self.ref_type

    def type_decl(self) -> str:
        """The name to use when this descriptor appears as a field or element type."""
        if self.is_ref:
            return self.ref_type
        return self.go_type

    def type_decl_with_nullable(self) -> str:
        type_decl = self.type_decl()
        if schema_value_is_pointer(self):
            return '*' + type_decl.removeprefix('*')
        return type_decl

    @property
    def is_zero(self) -> bool:
        return self.type_decl() == ''

    @property
    def format(self) -> str:
        if self.openapi_schema is not None:
            return self.openapi_schema.format or ''
        return ''

    @property
    def is_any_type(self) -> bool:
        return self.type_decl() in ('any', '[]any')

    def needs_validation(self) -> bool:
        """Whether values of this type are checked by calling a Validate method."""
        if self.is_external_ref:
            return False
        if self.ref_type:
            return True
        if self.is_primitive_alias:
            return False
        if self.constraints.validation_tags:
            return True
        if self.union_elements:
            return True

        if self.properties:
            return any(
                prop.constraints.validation_tags or prop.needs_custom_validation()
                for prop in self.properties
            )

        if self.additional_properties_type is not None:
            c = self.constraints
            if c.min_properties is not None or c.max_properties is not None:
                return True
            return self.additional_properties_type.needs_validation()

        if self.array_type is not None:
            c = self.constraints
            if c.min_items is not None or c.max_items is not None:
                return True
            return self.array_type.needs_validation()

        type_decl = self.type_decl()
        if type_decl in ('', 'any'):
            return False
        if is_primitive_type(type_decl) or is_primitive_type(type_decl.removeprefix('*')):
            return False
        if type_decl.startswith(('struct', 'map[', '[]')):
            return False
        return True

    def contains_unions(self) -> bool:
        if self.is_union_wrapper:
            return True
        if any(prop.schema.contains_unions() for prop in self.properties):
            return True
        if self.array_type is not None and self.array_type.contains_unions():
            return True
        if (
            self.additional_properties_type is not None
            and self.additional_properties_type.contains_unions()
        ):
            return True
        return False

    def create_go_struct(self, fields: list[str]) -> str:
        """Render the ``struct {...}`` literal of an object descriptor."""
        parts = ['struct {', *fields]

        if self.has_additional_properties:
            parts.append(
                f'AdditionalProperties map[string]{additional_properties_type(self)} `json:"-"`'
            )

        if len(self.union_elements) == 2:
            first, second = self.union_elements
            parts.append(f'runtime.Either[{first}, {second}]')
        elif self.union_elements:
            parts.append('union json.RawMessage')

        parts.append('}')
        return '\n'.join(parts)


def schema_value_is_pointer(schema: GoSchema | None) -> bool:
    """Whether a map value or array item must be a pointer to carry ``null``."""
    if schema is None:
        return False

    type_decl = schema.ref_type or schema.go_type
    if type_decl.startswith(('[]', 'map[')):
        return False

    openapi_schema = schema.openapi_schema
    if openapi_schema is not None:
        return openapi_schema.has_nil_type or bool(openapi_schema.nullable)
    return False


def additional_properties_type(schema: GoSchema) -> str:
    value = schema.additional_properties_type
    if value is None:
        return 'any'
    type_decl = value.ref_type or value.go_type
    if schema_value_is_pointer(value):
        type_decl = '*' + type_decl.removeprefix('*')
    return type_decl


def _schema_has_additional_properties(schema: Schema) -> bool:
    additional = schema.additionalProperties
    if additional is None or additional is False:
        return False
    return True


@dataclasses.dataclass(frozen=True)
class Property:
    """A field of an object descriptor.

    Attributes:
        go_name: Go field name.
        json_field_name: Property name in the document.
        schema: Descriptor of the field type.
        constraints: Constraints computed with the parent's required list.
        description: Description used for the field comment.
        extensions: Vendor extensions declared on the property schema.
        deprecated: Whether the property is deprecated.
        sensitive_data: Masking strategy, if the field is sensitive.
        parent_type: Name of the owning type, used to detect self references.
    """

    go_name: str
    json_field_name: str = ''
    schema: GoSchema = dataclasses.field(default_factory=GoSchema)
    constraints: Constraints = dataclasses.field(default_factory=Constraints)
    description: str = ''
    extensions: dict[str, Any] = dataclasses.field(default_factory=dict)
    deprecated: bool = False
    sensitive_data: SensitiveDataConfig | None = None
    parent_type: str = ''

    def is_equal(self, other: 'Property') -> bool:
        return (
            self.json_field_name == other.json_field_name
            and self.schema.type_decl() == other.schema.type_decl()
            and self.constraints.is_equal(other.constraints)
        )

    def go_type_def(self) -> str:
        type_decl = self.schema.type_decl()
        if self.is_pointer_type():
            return '*' + type_decl.removeprefix('*')
        return type_decl

    def is_pointer_type(self) -> bool:
        """Whether the field is rendered as a pointer.

        A field whose type is its own parent is always a pointer; arrays and
        maps never are; anything else is a pointer when nullable, unless
        optional pointers are skipped for it.
        """
        schema = self.schema
        if self.parent_type:
            if schema.ref_type and schema.ref_type == self.parent_type:
                return True
            if schema.go_type and schema.go_type == self.parent_type:
                return True

        openapi_schema = schema.openapi_schema
        if openapi_schema is not None:
            if 'array' in openapi_schema.types:
                return False
            if 'object' in openapi_schema.types and _schema_has_additional_properties(
                openapi_schema
            ):
                return False

        if schema.type_decl().startswith(('map[', '[]')):
            return False

        return not schema.skip_optional_pointer and bool(self.constraints.nullable)

    def needs_custom_validation(self) -> bool:
        """Whether the field is validated by calling its own Validate method."""
        type_decl = self.schema.type_decl()
        if not type_decl:
            return False

        if self.schema.array_type is not None and self.schema.array_type.needs_validation():
            return True
        if (
            self.schema.additional_properties_type is not None
            and self.schema.additional_properties_type.needs_validation()
        ):
            return True

        is_primitive = (
            self.schema.is_primitive_alias
            or is_primitive_type(type_decl)
            or type_decl.startswith(('[]', 'map['))
        )
        return not is_primitive


@dataclasses.dataclass(frozen=True)
class TypeDefinition:
    """A named Go type emitted at the top level.

    Attributes:
        name: Go type name.
        json_name: Name or reference of the source in the document.
        schema: The descriptor the type is declared from.
        spec_location: Document section the type comes from.
        needs_marshaler: Whether custom JSON (un)marshalling is required.
        has_sensitive_data: Whether any field is marked sensitive.
    """

    name: str
    json_name: str = ''
    schema: GoSchema = dataclasses.field(default_factory=GoSchema)
    spec_location: SpecLocation | None = None
    needs_marshaler: bool = False
    has_sensitive_data: bool = False

    @property
    def is_alias(self) -> bool:
        return self.schema.define_via_alias

    @property
    def is_optional(self) -> bool:
        return not self.schema.constraints.required


def needs_marshaler(schema: GoSchema) -> bool:
    """Embedded fields (empty JSON name) need custom (un)marshalling.

    Unions are excluded, they always get their own marshaller.
    """
    if not any(not prop.json_field_name for prop in schema.properties):
        return False
    return not schema.union_elements


def has_sensitive_data(schema: GoSchema) -> bool:
    return any(prop.sensitive_data is not None for prop in schema.properties)


# ============================================================================
# Error message paths
# ============================================================================


@dataclasses.dataclass(frozen=True)
class ErrorPathField:
    """One resolved step of an error-message path such as ``data[].message``.

    Attributes:
        go_name: Go field name of the step.
        go_type: Go type of the field.
        container_type: Type of the struct holding the field.
        is_nullable: Whether the field is nullable.
        is_array: Whether the field is an array.
        array_type: Element type of an array field.
        is_array_index: Whether the path takes the first element here.
    """

    go_name: str
    go_type: str
    container_type: str
    is_nullable: bool = False
    is_array: bool = False
    array_type: str = ''
    is_array_index: bool = False


def parse_error_path(path: str) -> list[tuple[str, bool]]:
    """Split ``"data[].message"`` into ``[('data', True), ('message', False)]``."""
    return [
        (part.removesuffix('[]'), part.endswith('[]')) for part in path.split('.')
    ]


def resolve_error_path(
    type_name: str,
    error_mapping: dict[str, str],
    schema: GoSchema,
    type_schemas: dict[str, GoSchema],
) -> list[ErrorPathField] | None:
    """Follow the configured error-message path through a response type.

    Args:
        type_name: Name of the error response type.
        error_mapping: Type name mapped to its dotted JSON path.
        schema: Descriptor of the error response type.
        type_schemas: Descriptors of all named types, for following references.

    Returns:
        The resolved steps, or ``None`` when no path is configured or a
        step does not exist.
    """
    path = error_mapping.get(type_name)
    if not path:
        return None

    fields = []
    container = type_name
    for property_name, is_array_index in parse_error_path(path):
        prop = next(
            (p for p in schema.properties if p.json_field_name == property_name), None
        )
        if prop is None:
            return None

        is_array = prop.schema.array_type is not None
        fields.append(
            ErrorPathField(
                go_name=prop.go_name,
                go_type=prop.schema.go_type,
                container_type=container,
                is_nullable=bool(prop.constraints.nullable),
                is_array=is_array,
                array_type=prop.schema.array_type.go_type if is_array else '',
                is_array_index=is_array_index,
            )
        )

        schema = prop.schema
        if is_array_index and schema.array_type is not None:
            schema = schema.array_type

        if schema.go_type and not schema.properties:
            if schema.go_type in type_schemas:
                container = schema.go_type
                schema = type_schemas[schema.go_type]
        elif schema.go_type:
            container = schema.go_type

    return fields

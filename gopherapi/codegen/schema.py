"""Schema resolution engine.

This module turns one schema node of the document into a :class:`GoSchema`
descriptor. It provides:
- generate_go_schema, the recursive entry point
- create_object_schema, building struct and map descriptors
- oapi_schema_to_go_type, mapping arrays and primitives
- create_enums_schema, building enum descriptors with constant names
- replace_inline_types and enhance_schema, the hoisting and combinator helpers

Anonymous nested types are named after their structural path; references
to components resolve to the component's registered name, so the engine
never descends into a component from the outside.
"""

import contextlib
import dataclasses
import logging

from gopherapi.codegen.constraints import Constraints, new_constraints
from gopherapi.codegen.context import ParseOptions
from gopherapi.codegen.extensions import (
    ExtensionKey,
    decode_extension,
    decode_extension_lenient,
)
from gopherapi.codegen.fields import (
    create_property_go_field_name,
    gen_fields_from_properties,
)
from gopherapi.codegen.naming import (
    is_standard_component_reference,
    path_to_type_name,
    ref_path_to_go_type,
    ref_to_type_name,
    schema_name_to_type_name,
)
from gopherapi.codegen.resolver import ReferenceResolver, SchemaNode
from gopherapi.codegen.types import (
    GoSchema,
    Property,
    SpecLocation,
    TypeDefinition,
    additional_properties_type,
    has_sensitive_data,
    is_primitive_type,
    needs_marshaler,
)
from gopherapi.exceptions import CodeGenerationError, UnhandledTypeError
from gopherapi.openapi.models import Schema

__all__ = [
    'create_enums_schema',
    'create_object_schema',
    'enhance_schema',
    'enhance_with_additional_properties',
    'generate_go_schema',
    'has_write_only_required_fields',
    'oapi_schema_to_go_type',
    'replace_inline_types',
]

logger = logging.getLogger(__name__)

# Path segments marking schemas nested inside another schema's map values or items
_NESTED_PATH_MARKERS = ('AdditionalProperties', 'Items')

_PRIMITIVE_KINDS = ('string', 'number', 'integer', 'boolean')

_INTEGER_FORMATS = frozenset(
    ['int64', 'int32', 'int16', 'int8', 'uint64', 'uint32', 'uint16', 'uint8', 'uint']
)

_STRING_FORMATS = {
    'byte': '[]byte',
    'email': 'runtime.Email',
    'date': 'runtime.Date',
    'date-time': 'time.Time',
    'json': 'runtime.RawMessage',
    'binary': 'runtime.File',
    'uuid': 'uuid.UUID',
}


# ============================================================================
# Entry point
# ============================================================================


def generate_go_schema(node: SchemaNode | None, options: ParseOptions) -> GoSchema:
    """Resolve a schema node into a type descriptor.

    Args:
        node: The schema to resolve, ``None`` for a missing schema (for
            example an array without ``items``).
        options: The resolution context; ``options.reference`` is the
            reference the node was reached through and ``options.path``
            names anonymous nested types.

    Returns:
        The descriptor. Named types created on the way are carried in
        ``additional_types`` and registered with ``options.tracker``.

    Raises:
        CodeGenerationError: If the node cannot be represented.
        SchemaReferenceError: If a reference cannot be resolved.
    """
    if node is None:
        return GoSchema(go_type='any')

    schema = node.schema
    schema_ref = node.ref
    ref = options.reference

    # Map values and array items keep their own reference even when the
    # caller did not pass one along.
    if not ref and schema_ref and any(p in _NESTED_PATH_MARKERS for p in options.path):
        ref = schema_ref

    tracking_key = _tracking_key(schema_ref, ref, options.path)

    if ref and is_standard_component_reference(ref):
        if tracking_key in options.visited:
            logger.debug(f'Circular reference to {ref}')
            return GoSchema(
                go_type=ref_path_to_go_type(ref),
                define_via_alias=True,
                description=schema.description or '',
                openapi_schema=schema,
            )

        # writeOnly required fields must not be required in a response, so
        # the component is expanded inline there.
        needs_inline_type = (
            options.spec_location == SpecLocation.RESPONSE
            and has_write_only_required_fields(schema, options.resolver)
        )
        if not needs_inline_type:
            return _component_reference(ref, schema, options)

        logger.debug(f'Expanding {ref} inline: writeOnly fields are required')
        ref = ''
        options = options.with_reference('')

    should_track = bool(tracking_key and schema_ref)
    if should_track and tracking_key in options.visited:
        name = options.tracker.lookup_by_ref(schema_ref)
        if name is None:
            if is_standard_component_reference(schema_ref):
                name = path_to_type_name(options.path)
            else:
                name = ref_to_type_name(schema_ref)
        logger.debug(f'Circular schema {tracking_key}, using {name}')
        return GoSchema(
            go_type=name,
            define_via_alias=True,
            description=schema.description or '',
            openapi_schema=schema,
        )

    if ref and not is_standard_component_reference(ref):
        hoisted = _lookup_hoisted(ref, options)
        if hoisted is not None:
            return hoisted

    guard = options.visiting(tracking_key) if should_track else contextlib.nullcontext()
    with guard:
        return _generate(schema, schema_ref, ref, options)


def _tracking_key(schema_ref: str, ref: str, path: tuple[str, ...]) -> str:
    if schema_ref:
        return schema_ref
    if ref:
        return ref
    if len(path) == 1:
        return f'#/components/schemas/{path[0]}'
    return '.'.join(path)


def _component_reference(ref: str, schema: Schema, options: ParseOptions) -> GoSchema:
    """Descriptor for a reference to a component: an alias of its registered name."""
    name = ref_path_to_go_type(ref)
    is_primitive_alias = False

    actual_name = options.tracker.lookup_by_ref(ref)
    if actual_name is not None:
        name = actual_name
        type_def = options.tracker.lookup_by_name(actual_name)
        if (
            type_def is not None
            and type_def.is_alias
            and is_primitive_type(type_def.schema.go_type)
        ):
            is_primitive_alias = True

    # Enums are never primitive aliases, they carry their own Validate method.
    if (
        not is_primitive_alias
        and schema.types
        and not schema.enum
        and schema.types[0] in _PRIMITIVE_KINDS
    ):
        is_primitive_alias = True

    return GoSchema(
        go_type=name,
        define_via_alias=True,
        is_primitive_alias=is_primitive_alias,
        description=schema.description or '',
        openapi_schema=schema,
        constraints=new_constraints(schema, has_nil_type=schema.has_nil_type),
    )


def _lookup_hoisted(ref: str, options: ParseOptions) -> GoSchema | None:
    """Reuse the type already hoisted for a deep reference."""
    name = options.tracker.lookup_by_ref(ref)
    if name is None:
        return None
    type_def = options.tracker.lookup_by_name(name)
    if type_def is None or type_def.json_name != ref:
        return None
    return dataclasses.replace(type_def.schema, ref_type=name, additional_types=[type_def])


def _generate(
    schema: Schema, schema_ref: str, ref: str, options: ParseOptions
) -> GoSchema:
    from gopherapi.codegen.merge import create_from_combinator

    description = schema.description or ''
    merged = create_from_combinator(schema, options)

    # The combinator alone determined the type.
    if not merged.is_zero and (
        merged.define_via_alias
        or merged.go_type.startswith(('map[', '[]'))
        or is_primitive_type(merged.go_type)
        or merged.enum_values
    ):
        return merged

    go_type = decode_extension(schema.extensions, ExtensionKey.GO_TYPE)
    if go_type is not None:
        out = GoSchema(
            go_type=go_type,
            define_via_alias=True,
            description=description,
            openapi_schema=schema,
        )
        return enhance_schema(out, merged, options)

    skip_optional_pointer = decode_extension(
        schema.extensions, ExtensionKey.GO_TYPE_SKIP_OPTIONAL_POINTER
    )

    # A component reference reached with its reference cleared: reuse the
    # component type instead of generating it a second time.
    if (
        len(options.path) > 1
        and schema_ref
        and is_standard_component_reference(schema_ref)
    ):
        actual_name = options.tracker.lookup_by_ref(schema_ref)
        if actual_name is not None:
            return GoSchema(
                go_type=actual_name,
                define_via_alias=True,
                description=description,
                openapi_schema=schema,
                constraints=new_constraints(schema, has_nil_type=schema.has_nil_type),
            )

    types = schema.types

    if not types and schema.const is not None:
        return GoSchema(
            go_type='string',
            define_via_alias=True,
            description=description,
            openapi_schema=schema,
            constraints=new_constraints(schema),
        )

    if schema.format == 'binary':
        return GoSchema(
            go_type='runtime.File',
            define_via_alias=True,
            description=description,
            openapi_schema=schema,
            constraints=new_constraints(schema),
        )

    if not types or 'object' in types:
        out = create_object_schema(schema, options)
    elif schema.enum:
        out = create_enums_schema(schema, options)
    else:
        out = oapi_schema_to_go_type(schema, options)
    out = enhance_schema(out, merged, options)

    if skip_optional_pointer is not None:
        out = dataclasses.replace(out, skip_optional_pointer=skip_optional_pointer)

    if ref and not is_standard_component_reference(ref):
        out = _hoist_deep_reference(out, ref, options)

    return out


def _hoist_deep_reference(schema: GoSchema, ref: str, options: ParseOptions) -> GoSchema:
    """Register the schema behind a deep reference as a named type.

    Every path reaching the same deep reference then converges on one
    definition.
    """
    name = ref_to_type_name(ref)
    spec_location = options.spec_location or SpecLocation.SCHEMA

    if (
        schema.properties
        or schema.has_additional_properties
        or schema.union_elements
        or not schema.define_via_alias
    ):
        type_def = TypeDefinition(
            name=name,
            json_name=ref,
            schema=schema,
            spec_location=spec_location,
            needs_marshaler=needs_marshaler(schema),
            has_sensitive_data=has_sensitive_data(schema),
        )
    else:
        type_def = TypeDefinition(
            name=name, json_name=ref, schema=schema, spec_location=spec_location
        )

    options.tracker.register(type_def, ref)
    logger.debug(f'Hoisted deep reference {ref} as {name}')
    return dataclasses.replace(
        schema, ref_type=name, additional_types=[*schema.additional_types, type_def]
    )


# ============================================================================
# Objects
# ============================================================================


def create_object_schema(schema: Schema, options: ParseOptions) -> GoSchema:
    """Build the descriptor of an object (or untyped) schema.

    Objects without properties become ``map[string]any``, untyped empty
    schemas become ``struct{}``, objects with only additional properties
    become ``map[string]T`` and everything else a struct with one field per
    property, in declaration order.
    """
    out = GoSchema(
        description=schema.description or '',
        openapi_schema=schema,
        constraints=new_constraints(schema, has_nil_type=schema.has_nil_type),
    )

    has_combinators = (
        schema.allOf is not None or schema.anyOf is not None or schema.oneOf is not None
    )

    if not schema.properties and not _has_additional_properties(schema) and not has_combinators:
        if 'object' in schema.types:
            return dataclasses.replace(out, go_type='map[string]any', define_via_alias=True)
        # struct{} rather than any, so that methods can be attached to it
        return dataclasses.replace(out, go_type='struct{}')

    out = enhance_with_additional_properties(out, schema, options)

    if not schema.properties and not has_combinators:
        return dataclasses.replace(
            out,
            has_additional_properties=False,
            go_type=f'map[string]{additional_properties_type(out)}',
        )

    required = schema.required or []
    parent_type = path_to_type_name(options.path[:1]) if options.path else ''
    field_names: dict[str, int] = {}
    properties = []
    additional_types = list(out.additional_types)

    for name, value in (schema.properties or {}).items():
        node = options.resolver.node(value)
        property_path = options.extend_path(name)
        opts = options.with_reference(node.ref if node else '').with_path(property_path)
        try:
            prop_schema = generate_go_schema(node, opts)
        except CodeGenerationError as e:
            raise CodeGenerationError(
                f"error generating Go schema for property '{name}'", cause=e
            ) from e

        # null-only properties cannot be represented
        if prop_schema.is_zero:
            continue

        raw = node.schema if node else None
        constraints = new_constraints(
            raw,
            required=name in required,
            has_nil_type=raw.has_nil_type if raw else False,
        )
        prop_schema = dataclasses.replace(prop_schema, constraints=constraints)

        extensions = raw.extensions if raw else {}
        prop_schema, _ = replace_inline_types(prop_schema, opts)

        base_name = create_property_go_field_name(name, extensions)
        go_name = base_name
        if base_name in field_names:
            field_names[base_name] += 1
            go_name = f'{base_name}{field_names[base_name]}'
        else:
            field_names[base_name] = 0

        properties.append(
            Property(
                go_name=go_name,
                json_field_name=name,
                schema=prop_schema,
                constraints=constraints,
                description=(raw.description or '') if raw else '',
                extensions=extensions,
                deprecated=bool(raw.deprecated) if raw else False,
                sensitive_data=decode_extension_lenient(
                    extensions, ExtensionKey.SENSITIVE_DATA
                ),
                parent_type=parent_type,
            )
        )
        additional_types.extend(prop_schema.additional_types)

    out = dataclasses.replace(
        out, properties=properties, additional_types=additional_types
    )
    out = dataclasses.replace(
        out,
        go_type=out.create_go_struct(gen_fields_from_properties(properties, options.generate)),
    )

    type_name = decode_extension(schema.extensions, ExtensionKey.GO_TYPE_NAME)
    if type_name is not None:
        type_def = TypeDefinition(
            name=type_name,
            schema=out,
            spec_location=SpecLocation.SCHEMA,
            has_sensitive_data=has_sensitive_data(out),
        )
        options.tracker.register(type_def)
        logger.debug(f'Renamed object at {".".join(options.path)} to {type_name}')
        out = GoSchema(
            go_type=type_name,
            define_via_alias=True,
            description=out.description,
            additional_types=[*out.additional_types, type_def],
        )

    return out


def _has_additional_properties(schema: Schema) -> bool:
    additional = schema.additionalProperties
    return additional is not None and additional is not False


def enhance_with_additional_properties(
    out: GoSchema, schema: Schema, options: ParseOptions
) -> GoSchema:
    """Attach the value type of ``additionalProperties`` to an object descriptor.

    ``true`` maps to ``any``; a schema is resolved at ``<path>.AdditionalProperties``
    and hoisted to a named type when it is itself a struct or union.
    """
    if not _has_additional_properties(schema):
        return out

    out = dataclasses.replace(
        out,
        has_additional_properties=True,
        additional_properties_type=GoSchema(go_type='any'),
    )

    additional = schema.additionalProperties
    if isinstance(additional, bool):
        return out

    node = options.resolver.node(additional)
    path = options.extend_path('AdditionalProperties')
    tracker = options.tracker

    # Pre-register deep references so a circular use finds the name.
    pre_registered = ''
    registered_here = False
    if node.ref and not is_standard_component_reference(node.ref):
        existing = tracker.lookup_by_ref(node.ref)
        if existing is not None:
            pre_registered = existing
        else:
            pre_registered = tracker.generate_unique_name(path_to_type_name(path))
            tracker.register_ref(node.ref, pre_registered)
            registered_here = True

    try:
        value = generate_go_schema(node, options.with_path(path))
    except CodeGenerationError as e:
        raise CodeGenerationError(
            'error generating type for additionalProperties', cause=e
        ) from e

    should_create = bool(
        value.properties or value.has_additional_properties or value.union_elements
    ) and not value.ref_type
    # Already registered before: a circular use, created by the first caller.
    if should_create and node.ref and not registered_here:
        should_create = False

    if should_create:
        type_name = pre_registered or tracker.generate_unique_name(
            path_to_type_name(path)
        )
        type_def = TypeDefinition(
            name=type_name,
            json_name='.'.join(path),
            schema=value,
            spec_location=SpecLocation.UNION,
            needs_marshaler=needs_marshaler(value),
        )
        tracker.register(type_def, node.ref)
        value = dataclasses.replace(
            value, ref_type=type_name, additional_types=[*value.additional_types, type_def]
        )

    return dataclasses.replace(
        out,
        additional_properties_type=value,
        additional_types=[*out.additional_types, *value.additional_types],
    )


def replace_inline_types(src: GoSchema, options: ParseOptions) -> tuple[GoSchema, str]:
    """Hoist an anonymous struct or union descriptor to a named type.

    Returns:
        A reference descriptor to the new type and the type name, or the
        unchanged descriptor and an empty name when nothing was hoisted.
    """
    if (not src.properties and not src.union_elements) or src.ref_type:
        return src, ''

    name = options.tracker.generate_unique_name(path_to_type_name(options.path))

    # "type Foo []Bar" marshals on its own
    marshaler = False if src.array_type is not None else needs_marshaler(src)
    spec_location = SpecLocation.UNION if src.union_elements else SpecLocation.SCHEMA

    type_def = TypeDefinition(
        name=name,
        json_name='-',
        schema=src,
        spec_location=spec_location,
        needs_marshaler=marshaler,
    )
    options.tracker.register(type_def)
    logger.debug(f'Hoisted inline type {name}')
    return GoSchema(ref_type=name, additional_types=[type_def]), name


def enhance_schema(src: GoSchema, other: GoSchema, options: ParseOptions) -> GoSchema:
    """Fold the combinator result ``other`` into the descriptor ``src``.

    The properties and union of ``other`` are appended and the struct is
    re-rendered; a descriptor left without fields but with a reference
    becomes an alias.
    """
    if not other.union_elements and not other.properties:
        return src

    properties = [*src.properties, *other.properties]
    src = dataclasses.replace(
        src,
        properties=properties,
        discriminator=other.discriminator,
        union_elements=other.union_elements,
        additional_types=[*src.additional_types, *other.additional_types],
        ref_type=other.ref_type,
    )
    src = dataclasses.replace(
        src,
        go_type=src.create_go_struct(gen_fields_from_properties(properties, options.generate)),
    )

    if other.ref_type and not src.properties and not src.union_elements:
        src = dataclasses.replace(src, define_via_alias=True)
    return src


# ============================================================================
# Arrays and primitives
# ============================================================================


def oapi_schema_to_go_type(schema: Schema, options: ParseOptions) -> GoSchema:
    """Map an array or primitive schema to its Go type.

    Primitives are always aliases; their validation is expressed through
    tags on the containing struct.

    Raises:
        UnhandledTypeError: If the declared type has no Go mapping.
    """
    types = schema.types
    description = schema.description or ''
    schema_format = schema.format or ''
    constraints = new_constraints(schema, has_nil_type=schema.has_nil_type)

    def primitive(go_type: str, skip_optional_pointer: bool = False) -> GoSchema:
        return GoSchema(
            go_type=go_type,
            define_via_alias=True,
            skip_optional_pointer=skip_optional_pointer,
            description=description,
            openapi_schema=schema,
            constraints=constraints,
        )

    if 'array' in types:
        return _array_schema(schema, options, constraints)

    default_int = options.generate.default_int_type or 'int'

    if 'integer' in types:
        if schema_format in _INTEGER_FORMATS:
            return primitive(schema_format)
        return primitive(default_int)

    if 'number' in types:
        if schema_format in ('double', 'decimal'):
            return primitive('float64')
        if schema_format in ('integer', 'int'):
            return primitive(default_int)
        if schema_format in ('int32', 'int64'):
            return primitive(schema_format)
        return primitive('float32')

    if 'boolean' in types or 'bool' in types:
        return primitive('bool')

    if 'string' in types:
        go_type = _STRING_FORMATS.get(schema_format, 'string')
        # enum constants must be literals
        if schema_format == 'date-time' and schema.enum:
            go_type = 'string'
        return primitive(go_type, skip_optional_pointer=schema_format == 'json')

    if 'null' in types:
        return GoSchema()

    raise UnhandledTypeError(types)


def _array_schema(
    schema: Schema, options: ParseOptions, constraints: Constraints
) -> GoSchema:
    items = options.resolver.node(schema.items) if schema.items is not None else None
    opts = options.with_reference(items.ref) if items is not None else options
    item_schema = generate_go_schema(items, opts)

    # Nested arrays do not get an intermediate _Item type.
    if (
        (
            item_schema.has_additional_properties
            or item_schema.union_elements
            or item_schema.properties
        )
        and not item_schema.ref_type
        and item_schema.array_type is None
    ):
        item_path = options.extend_path('Item')
        type_name = options.tracker.generate_unique_name(path_to_type_name(item_path))
        type_def = TypeDefinition(
            name=type_name,
            json_name='.'.join(item_path),
            schema=item_schema,
            spec_location=SpecLocation.SCHEMA,
            needs_marshaler=needs_marshaler(item_schema),
            has_sensitive_data=has_sensitive_data(item_schema),
        )
        options.tracker.register(type_def)
        item_schema = dataclasses.replace(
            item_schema,
            ref_type=type_name,
            additional_types=[*item_schema.additional_types, type_def],
        )

    element_type = item_schema.ref_type or item_schema.go_type
    return GoSchema(
        go_type='[]' + element_type,
        array_type=item_schema,
        additional_types=list(item_schema.additional_types),
        properties=list(item_schema.properties),
        description=schema.description or '',
        openapi_schema=schema,
        constraints=constraints,
    )


# ============================================================================
# Enums
# ============================================================================


def create_enums_schema(schema: Schema, options: ParseOptions) -> GoSchema:
    """Build an enum descriptor.

    The base type comes from the primitive mapping. Constant names are taken
    from ``x-enum-names`` where given, otherwise derived from the values;
    with ``always_prefix_enum_values`` they are prefixed by the type name
    derived from the path. Enums are never aliases.
    """
    out = oapi_schema_to_go_type(schema, options)

    names = decode_extension(schema.extensions, ExtensionKey.ENUM_NAMES) or []
    prefix = ''
    if options.generate.always_prefix_enum_values and options.path:
        prefix = path_to_type_name(options.path)

    values: dict[str, str] = {}
    for i, value in enumerate(schema.enum or []):
        if value is None:
            continue

        if i < len(names) and names[i]:
            name = names[i]
        else:
            name = _enum_value_name(value)
        name = prefix + name

        if name in values:
            counter = 1
            while f'{name}{counter}' in values:
                counter += 1
            name = f'{name}{counter}'

        values[name] = _enum_literal(value)

    return dataclasses.replace(out, enum_values=values, define_via_alias=False)


def _enum_value_name(value) -> str:
    if isinstance(value, bool):
        return 'True' if value else 'False'
    return schema_name_to_type_name(str(value))


def _enum_literal(value) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def has_write_only_required_fields(schema: Schema, resolver: ReferenceResolver) -> bool:
    """Whether any required property of ``schema`` is writeOnly."""
    required = set(schema.required or [])
    for name, value in (schema.properties or {}).items():
        if name not in required:
            continue
        node = resolver.node(value)
        if node is not None and node.schema.writeOnly:
            return True
    return False

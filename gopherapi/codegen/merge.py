"""Combinator (allOf/anyOf/oneOf) resolution.

allOf branches are merged into one schema where possible; anyOf and oneOf
branches become union types that the enclosing struct embeds.
"""

import dataclasses
import logging
from typing import Any

from gopherapi.codegen.constraints import Constraints
from gopherapi.codegen.context import ParseOptions
from gopherapi.codegen.fields import gen_fields_from_properties
from gopherapi.codegen.naming import (
    is_standard_component_reference,
    path_to_type_name,
    ref_path_to_go_type,
    ref_to_type_name,
)
from gopherapi.codegen.resolver import ReferenceResolver, SchemaNode
from gopherapi.codegen.schema import generate_go_schema
from gopherapi.codegen.types import (
    GoSchema,
    Property,
    SpecLocation,
    TypeDefinition,
    has_sensitive_data,
    needs_marshaler,
)
from gopherapi.codegen.union import generate_union
from gopherapi.exceptions import SchemaMergeError
from gopherapi.openapi.models import Reference, Schema

__all__ = [
    'create_from_combinator',
    'is_discriminated_union_with_child',
    'is_metadata_only_schema',
    'merge_all_of_schemas',
    'merge_openapi_schemas',
]

logger = logging.getLogger(__name__)

_PRIMITIVE_KINDS = frozenset(['string', 'integer', 'number', 'boolean'])


def create_from_combinator(schema: Schema | None, options: ParseOptions) -> GoSchema:
    """Resolve the allOf/anyOf/oneOf of a schema.

    Returns:
        An empty descriptor when the schema has no combinators (or they are
        ignored), the allOf/union result itself when it fully determines the
        type, and otherwise a struct embedding the merged allOf properties
        plus one field per anyOf/oneOf union type.
    """
    if schema is None:
        return GoSchema()

    has_all_of = bool(schema.allOf)
    has_any_of = bool(schema.anyOf)
    has_one_of = bool(schema.oneOf)

    if not has_all_of and not has_any_of and not has_one_of:
        return GoSchema()

    # An explicit primitive type wins over oneOf/anyOf used as value constraints.
    if _PRIMITIVE_KINDS.intersection(schema.types) and not has_all_of:
        return GoSchema()

    # type: array next to a combinator is handled by the array mapping.
    if 'array' in schema.types:
        return GoSchema()

    properties: list[Property] = []
    additional_types: list[TypeDefinition] = []

    if has_all_of:
        all_of = merge_all_of_schemas(schema.allOf, options)
        if not all_of.properties and not has_any_of and not has_one_of:
            return all_of
        properties.extend(all_of.properties)
        additional_types.extend(all_of.additional_types)

    for keyword, branches, discriminator, others in (
        ('anyOf', schema.anyOf, None, has_all_of or has_one_of),
        ('oneOf', schema.oneOf, schema.discriminator, has_all_of or has_any_of),
    ):
        if not branches:
            continue

        union_path = options.extend_path(keyword)
        union = generate_union(branches, discriminator, options.with_path(union_path))

        # A single branch is not a union.
        if not union.union_elements and not others:
            return union

        union = dataclasses.replace(
            union,
            go_type=union.create_go_struct(
                gen_fields_from_properties(union.properties, options.generate)
            ),
            is_union_wrapper=bool(union.union_elements),
        )
        union_name = path_to_type_name(union_path)
        type_def = TypeDefinition(
            name=union_name,
            json_name='-',
            schema=union,
            spec_location=SpecLocation.UNION,
            needs_marshaler=needs_marshaler(union),
            has_sensitive_data=has_sensitive_data(union),
        )
        additional_types.append(type_def)
        options.tracker.register(type_def)

        properties.append(
            Property(
                go_name=union_name,
                schema=GoSchema(ref_type=union_name),
                constraints=Constraints(nullable=True),
            )
        )

    out = GoSchema(properties=properties, additional_types=additional_types)
    return dataclasses.replace(
        out,
        go_type=out.create_go_struct(gen_fields_from_properties(properties, options.generate)),
    )


def is_metadata_only_schema(schema: Schema | None) -> bool:
    """Whether a schema only carries metadata such as a description or title."""
    if schema is None:
        return True
    return not (
        schema.types
        or schema.properties
        or schema.items is not None
        or schema.additionalProperties is not None
        or schema.allOf
        or schema.anyOf
        or schema.oneOf
        or schema.not_ is not None
    )


def is_discriminated_union_with_child(schema: Schema | None, child_ref: str) -> bool:
    """Whether ``schema`` is a discriminated union listing ``child_ref`` as a branch.

    A child embedding such a parent through allOf would recurse forever
    when unmarshalling, so the parent is dropped from the child's allOf.
    """
    if schema is None or schema.discriminator is None:
        return False

    for element in schema.oneOf or []:
        if isinstance(element, Reference) and element.ref == child_ref:
            return True

    mapping = schema.discriminator.mapping or {}
    return child_ref in mapping.values()


def _is_resolved_union(schema: GoSchema) -> bool:
    if schema.is_union_wrapper or schema.contains_unions():
        return True
    if any(t.schema.is_union_wrapper for t in schema.additional_types):
        return True
    return sum(1 for e in schema.union_elements if e.type_name != 'nil') > 1


def merge_all_of_schemas(
    all_of: list[Schema | Reference], options: ParseOptions
) -> GoSchema:
    """Resolve the allOf branches of a schema.

    When no branch resolves to a union, the raw branches are merged into a
    single schema which is then resolved. Otherwise referenced branches are
    embedded by name and inline branches are hoisted to path-derived types
    and embedded.

    Raises:
        SchemaMergeError: If two branches declare conflicting facets.
    """
    if not all_of:
        return GoSchema()

    resolver = options.resolver
    path = options.path
    nodes = [resolver.node(element) for element in all_of]

    if len(path) == 1:
        current_ref = f'#/components/schemas/{path[0]}'
        kept = []
        for node in nodes:
            if is_discriminated_union_with_child(node.schema, current_ref):
                logger.debug(f'Not embedding union {node.ref} into its branch {path[0]}')
                continue
            kept.append(node)
        nodes = kept

    if not nodes:
        return GoSchema()

    resolved = []
    for i, node in enumerate(nodes):
        sub_path = options.extend_path(f'allOf_{i}')
        element = generate_go_schema(
            node, options.with_reference(node.ref).with_path(sub_path)
        )
        resolved.append((node, element, sub_path))

    if not any(_is_resolved_union(element) for _, element, _ in resolved):
        return _merge_resolved(nodes, options)

    properties: list[Property] = []
    additional_types: list[TypeDefinition] = []

    for node, element, sub_path in resolved:
        if node.ref:
            if is_standard_component_reference(node.ref):
                type_name = ref_path_to_go_type(node.ref)
            else:
                type_name = ref_to_type_name(node.ref)
                exists = any(t.name == type_name for t in element.additional_types)
                if not exists and element.type_decl() != type_name:
                    type_def = TypeDefinition(
                        name=type_name,
                        schema=element,
                        spec_location=SpecLocation.UNION,
                        needs_marshaler=needs_marshaler(element),
                        has_sensitive_data=has_sensitive_data(element),
                    )
                    options.tracker.register(type_def)
                    additional_types.append(type_def)
                additional_types.extend(element.additional_types)

            properties.append(
                Property(
                    go_name=type_name,
                    schema=GoSchema(ref_type=type_name),
                    constraints=Constraints(nullable=False),
                )
            )
            continue

        if element.is_zero or is_metadata_only_schema(node.schema):
            continue

        field_name = path_to_type_name(sub_path)
        properties.append(
            Property(
                go_name=field_name,
                schema=GoSchema(ref_type=field_name),
                constraints=Constraints(nullable=True),
            )
        )
        type_def = TypeDefinition(
            name=field_name,
            schema=element,
            spec_location=SpecLocation.UNION,
            needs_marshaler=needs_marshaler(element),
            has_sensitive_data=has_sensitive_data(element),
        )
        options.tracker.register(type_def)
        additional_types.append(type_def)
        additional_types.extend(element.additional_types)

    out = GoSchema(properties=properties, additional_types=additional_types)
    return dataclasses.replace(
        out,
        go_type=out.create_go_struct(gen_fields_from_properties(properties, options.generate)),
    )


def _merge_resolved(nodes: list[SchemaNode], options: ParseOptions) -> GoSchema:
    """Merge allOf branches none of which is a union."""
    references = [node for node in nodes if node.ref]
    metadata_only = [
        node for node in nodes if not node.ref and is_metadata_only_schema(node.schema)
    ]

    # One reference plus descriptions: just the reference.
    if len(references) == 1 and len(references) + len(metadata_only) == len(nodes):
        ref_node = references[0]
        return generate_go_schema(ref_node, options.with_reference(ref_node.ref))

    merged: Schema | None = None
    last_ref = ''
    for node in nodes:
        if node.ref:
            last_ref = node.ref

        to_merge = node.schema
        # a single-branch union is just that branch
        single = None
        if to_merge.oneOf and len(to_merge.oneOf) == 1 and not to_merge.anyOf:
            single = to_merge.oneOf[0]
        elif to_merge.anyOf and len(to_merge.anyOf) == 1 and not to_merge.oneOf:
            single = to_merge.anyOf[0]
        if single is not None:
            branch = options.resolver.node(single)
            to_merge = branch.schema
            if branch.ref:
                last_ref = branch.ref

        merged = merge_openapi_schemas(merged, to_merge, options.resolver)

    if merged is None:
        return GoSchema()

    reference = last_ref if not merged.properties else ''
    return generate_go_schema(SchemaNode(merged), options.with_reference(reference))


# ============================================================================
# Raw schema merging
# ============================================================================


def _schema_type(schema: Schema | None) -> list[str]:
    if schema is None:
        return []
    if schema.type is not None:
        return schema.types
    if schema.properties is not None:
        return ['object']
    if schema.items is not None:
        return ['array']
    return []


def _merge_all_of(all_of: list, resolver: ReferenceResolver) -> Schema | None:
    merged = None
    for element in all_of:
        merged = merge_openapi_schemas(merged, resolver.deref(element, Schema), resolver)
    return merged


def merge_openapi_schemas(
    s1: Schema | None, s2: Schema, resolver: ReferenceResolver
) -> Schema:
    """Merge two raw schemas facet by facet.

    Untyped schemas (descriptions and the like) are ignored. Nested allOf
    lists are merged transitively, enums and required lists are unioned,
    properties are combined in order and nullability merges permissively.

    Raises:
        SchemaMergeError: If the schemas disagree on type, format, default,
            uniqueItems, an exclusive bound, readOnly, writeOnly or both
            declare an additionalProperties schema.
    """
    if s1 is None:
        return s2

    t1 = _schema_type(s1)
    t2 = _schema_type(s2)
    if not t2:
        return s1
    if not t1:
        return s2
    if t1 != t2:
        raise SchemaMergeError(
            'type', f'can not merge incompatible types: {t1}, {t2}'
        )

    one_of = [*(s1.oneOf or []), *(s2.oneOf or [])]

    if s1.allOf:
        s1 = _merge_all_of(s1.allOf, resolver)
    if s2.allOf:
        s2 = _merge_all_of(s2.allOf, resolver)

    if (s1.format or None) != (s2.format or None):
        raise SchemaMergeError('format', 'can not merge schemas with different formats')

    if s1.default is not None and s2.default is not None and s1.default != s2.default:
        raise SchemaMergeError('default')
    default = s1.default if s1.default is not None else s2.default

    for facet in ('uniqueItems', 'readOnly', 'writeOnly'):
        if bool(getattr(s1, facet)) != bool(getattr(s2, facet)):
            raise SchemaMergeError(facet)

    for facet in ('exclusiveMinimum', 'exclusiveMaximum'):
        if getattr(s1, facet) != getattr(s2, facet):
            raise SchemaMergeError(facet)

    enum = [*(s1.enum or []), *(s2.enum or [])]
    required = [*(s1.required or []), *(s2.required or [])]

    properties = None
    if s1.properties is not None or s2.properties is not None:
        properties = {**(s1.properties or {}), **(s2.properties or {})}

    fields: dict[str, Any] = {
        'type': t1 if len(t1) > 1 else t1[0],
        'format': s1.format,
        'enum': enum or None,
        'default': default,
        'uniqueItems': s1.uniqueItems,
        'exclusiveMinimum': s1.exclusiveMinimum,
        'exclusiveMaximum': s1.exclusiveMaximum,
        'nullable': True if (s1.nullable or s2.nullable) else None,
        'readOnly': s1.readOnly,
        'writeOnly': s1.writeOnly,
        'required': required or None,
        'properties': properties,
        'additionalProperties': _merge_additional_properties(s1, s2),
        'items': s1.items if s1.items is not None else s2.items,
        'oneOf': one_of or None,
    }
    extensions = {**s1.extensions, **s2.extensions}
    return Schema(**fields, **extensions)


def _merge_additional_properties(s1: Schema, s2: Schema) -> Any:
    a1 = s1.additionalProperties
    a2 = s2.additionalProperties
    if a1 is False or a2 is False:
        return False

    schema1 = a1 if a1 is not None and not isinstance(a1, bool) else None
    schema2 = a2 if a2 is not None and not isinstance(a2, bool) else None
    if schema1 is not None and schema2 is not None:
        raise SchemaMergeError(
            'additionalProperties', 'can not merge two additionalProperties schemas'
        )
    if schema1 is not None:
        return schema1
    if schema2 is not None:
        return schema2
    if a1 is True or a2 is True:
        return True
    return None

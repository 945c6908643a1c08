"""Union resolution for anyOf/oneOf branches."""

import dataclasses
import logging

from gopherapi.codegen.context import ParseOptions
from gopherapi.codegen.naming import (
    is_standard_component_reference,
    path_to_type_name,
    ref_path_to_obj_name,
)
from gopherapi.codegen.resolver import SchemaNode
from gopherapi.codegen.schema import generate_go_schema
from gopherapi.codegen.types import (
    GO_PRIMITIVE_TYPES,
    Discriminator,
    GoSchema,
    SpecLocation,
    TypeDefinition,
    UnionElement,
    needs_marshaler,
)
from gopherapi.exceptions import AmbiguousDiscriminatorError, DiscriminatorNotAllMappedError
from gopherapi.openapi.models import Discriminator_, Reference, Schema

__all__ = [
    'deduplicate_union_elements',
    'extract_discriminator_value',
    'generate_union',
]

logger = logging.getLogger(__name__)


def generate_union(
    elements: list[Schema | Reference],
    discriminator: Discriminator_ | None,
    options: ParseOptions,
) -> GoSchema:
    """Resolve the branches of an anyOf/oneOf into a union descriptor.

    ``null`` branches are dropped. A single remaining branch is returned as
    a plain (nullable, if a null branch was dropped) descriptor; otherwise
    each branch becomes a :class:`UnionElement`, inline non-primitive
    branches are hoisted to ``<path>_<index>`` types, and the discriminator
    mapping is filled in.

    Args:
        elements: The raw branches, in declaration order.
        discriminator: The discriminator declared next to the branches.
        options: The resolution context; the path ends in ``anyOf``/``oneOf``.

    Raises:
        AmbiguousDiscriminatorError: If an inline branch cannot be mapped
            while an explicit mapping exists.
        DiscriminatorNotAllMappedError: If the mapping does not cover every
            branch.
    """
    resolver = options.resolver

    if len(elements) == 1:
        node = resolver.node(elements[0])
        return generate_go_schema(node, options.with_reference(node.ref))

    nodes: list[SchemaNode] = []
    has_null = False
    for element in elements:
        node = resolver.node(element)
        if node is None:
            continue
        if node.schema.is_null_only:
            has_null = True
            continue
        nodes.append(node)

    if len(nodes) == 1:
        node = nodes[0]
        out = generate_go_schema(node, options.with_reference(node.ref))
        if has_null:
            out = dataclasses.replace(out, constraints=out.constraints.with_nullable(True))
        return out

    explicit_mapping = (discriminator.mapping or {}) if discriminator is not None else {}
    mapping: dict[str, str] = {}
    additional_types = []
    union_elements = []

    for i, node in enumerate(nodes):
        element_path = options.extend_path(str(i))
        ref = node.ref
        element = generate_go_schema(
            node, options.with_reference(ref).with_path(element_path)
        )

        if not ref and element.go_type not in GO_PRIMITIVE_TYPES:
            element_name = path_to_type_name(element_path)
            if element.type_decl() != element_name:
                type_def = TypeDefinition(
                    name=element_name,
                    json_name='-',
                    schema=element,
                    spec_location=SpecLocation.UNION,
                    needs_marshaler=needs_marshaler(element),
                )
                options.tracker.register(type_def)
                additional_types.append(type_def)
            additional_types.extend(element.additional_types)
            element = dataclasses.replace(element, go_type=element_name)
        elif ref and element.go_type not in GO_PRIMITIVE_TYPES:
            if not is_standard_component_reference(ref) and element.go_type.startswith(
                'struct'
            ):
                element_name = path_to_type_name(element_path)
                if not any(t.name == element_name for t in element.additional_types):
                    type_def = TypeDefinition(
                        name=element_name,
                        json_name='-',
                        schema=element,
                        spec_location=SpecLocation.UNION,
                        needs_marshaler=needs_marshaler(element),
                    )
                    options.tracker.register(type_def)
                    additional_types.append(type_def)
                    element = dataclasses.replace(element, go_type=element_name)
            additional_types.extend(element.additional_types)

        if discriminator is not None:
            value = _discriminator_value(node, element, discriminator, explicit_mapping, options)
            if value is None:
                continue
            mapping[value] = element.go_type

        union_elements.append(UnionElement(type_name=element.go_type, schema=element))

    out = GoSchema(
        union_elements=deduplicate_union_elements(union_elements),
        additional_types=additional_types,
    )

    if discriminator is not None:
        if len(mapping) != len(nodes):
            raise DiscriminatorNotAllMappedError(len(mapping), len(nodes))
        out = dataclasses.replace(
            out,
            discriminator=Discriminator(property=discriminator.propertyName, mapping=mapping),
        )

    return out


def _discriminator_value(
    node: SchemaNode,
    element: GoSchema,
    discriminator: Discriminator_,
    explicit_mapping: dict[str, str],
    options: ParseOptions,
) -> str | None:
    """Find the discriminator value of one branch.

    Returns:
        The value, or ``None`` for an inline branch that stays unmapped.
    """
    for value, target in explicit_mapping.items():
        if node.ref and target in (node.ref, ref_path_to_obj_name(node.ref)):
            return value

    value = extract_discriminator_value(node, discriminator.propertyName, options)
    if value:
        return value

    if not node.ref:
        if explicit_mapping:
            raise AmbiguousDiscriminatorError()
        logger.warning(
            f'Union branch {element.go_type} at {".".join(options.path)} '
            f'has no discriminator value, leaving it unmapped'
        )
        return None

    # referenced branches fall back to the component name
    return ref_path_to_obj_name(node.ref)


def extract_discriminator_value(
    node: SchemaNode | None, property_name: str, options: ParseOptions
) -> str:
    """Read the single enum value a branch declares for the discriminator property.

    Returns:
        The first enum value as a string, or ``''`` if there is none.
    """
    if node is None or not node.schema.properties:
        return ''

    value = node.schema.properties.get(property_name)
    prop = options.resolver.node(value)
    if prop is None or not prop.schema.enum:
        return ''

    first = prop.schema.enum[0]
    if isinstance(first, bool):
        return 'true' if first else 'false'
    return str(first)


def deduplicate_union_elements(elements: list[UnionElement]) -> list[UnionElement]:
    """Drop union elements with a repeated type name, preserving order.

    Of two elements with the same name the one with more constraints is
    kept; on a tie the first one wins.
    """
    result: list[UnionElement] = []
    index: dict[str, int] = {}

    for element in elements:
        if element.type_name not in index:
            index[element.type_name] = len(result)
            result.append(element)
            continue

        position = index[element.type_name]
        if element.schema.constraints.count() > result[position].schema.constraints.count():
            result[position] = element

    return result

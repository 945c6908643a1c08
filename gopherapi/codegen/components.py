"""Type definitions for the ``components`` section of a document.

Component schemas are named in two passes: :func:`pre_register_components`
assigns every schema its final name first, so that references to schemas
declared later already resolve to the right name while the schemas are
being resolved.
"""

import dataclasses
import logging

from gopherapi.codegen.context import ParseOptions
from gopherapi.codegen.extensions import ExtensionKey, decode_extension
from gopherapi.codegen.naming import (
    is_media_type_json,
    ref_path_to_go_type,
    schema_name_to_type_name,
)
from gopherapi.codegen.operations import param_to_go_type
from gopherapi.codegen.schema import generate_go_schema
from gopherapi.codegen.types import (
    SpecLocation,
    TypeDefinition,
    has_sensitive_data,
    needs_marshaler,
)
from gopherapi.openapi.models import (
    Components,
    Parameter,
    Reference,
    RequestBody,
    Response,
    Schema,
)

__all__ = [
    'get_components_parameters',
    'get_components_request_bodies',
    'get_components_responses',
    'get_components_schemas',
    'pre_register_components',
    'rename_component',
]

logger = logging.getLogger(__name__)


def _schema_ref(name: str) -> str:
    return f'#/components/schemas/{name}'


def rename_component(name: str, value: Schema | Reference | None) -> str:
    """The Go name of a component: ``x-go-name`` if set, else the normalized name.

    References keep the normalized name.
    """
    if value is None or isinstance(value, Reference):
        return schema_name_to_type_name(name)
    override = decode_extension(value.extensions, ExtensionKey.GO_NAME)
    if override is not None:
        return override
    return schema_name_to_type_name(name)


def pre_register_components(components: Components | None, options: ParseOptions) -> None:
    """Assign every component schema its final name, in declaration order."""
    if components is None or not components.schemas:
        return

    tracker = options.tracker
    for name, value in components.schemas.items():
        type_name = tracker.generate_unique_name(rename_component(name, value))
        tracker.register_name(type_name)
        tracker.register_ref(_schema_ref(name), type_name)
        if type_name != schema_name_to_type_name(name):
            logger.debug(f'Component schema {name} is named {type_name}')


def get_components_schemas(
    schemas: dict[str, Schema | Reference] | None, options: ParseOptions
) -> list[TypeDefinition]:
    """Resolve every component schema into a named type.

    Null-only schemas produce nothing. The auxiliary types created while
    resolving a schema follow its own definition.
    """
    types = []
    tracker = options.tracker

    for name, value in (schemas or {}).items():
        node = options.resolver.node(value)
        opts = options.with_reference(node.ref).with_path([name])
        go_schema = generate_go_schema(node, opts)
        if go_schema.is_zero:
            logger.debug(f'Skipping component schema {name}, it has no type')
            continue

        ref = _schema_ref(name)
        type_name = tracker.lookup_by_ref(ref) or rename_component(name, value)
        type_def = TypeDefinition(
            name=type_name,
            json_name=name,
            schema=go_schema,
            spec_location=SpecLocation.SCHEMA,
            needs_marshaler=needs_marshaler(go_schema),
            has_sensitive_data=has_sensitive_data(go_schema),
        )
        tracker.register(type_def, ref)
        types.append(type_def)
        types.extend(go_schema.additional_types)

    return types


def get_components_parameters(
    params: dict[str, Parameter | Reference] | None, options: ParseOptions
) -> list[TypeDefinition]:
    """Resolve every component parameter into a named type.

    Parameters with an inline schema become aliases of their type;
    parameters referencing a schema alias that schema unless they share
    its name.
    """
    types = []
    tracker = options.tracker

    for name, value in (params or {}).items():
        param = options.resolver.deref(value, Parameter)
        go_schema = param_to_go_type(param, options.with_path([name]))

        schema_ref = param.schema_.ref if isinstance(param.schema_, Reference) else ''
        if schema_ref:
            type_name = schema_name_to_type_name(name)
            target = tracker.lookup_by_ref(schema_ref) or ref_path_to_go_type(schema_ref)
            if type_name == target:
                tracker.register_ref(f'#/components/parameters/{name}', target)
                continue
        else:
            override = decode_extension(param.extensions, ExtensionKey.GO_NAME)
            type_name = override or schema_name_to_type_name(name)
        go_schema = dataclasses.replace(go_schema, define_via_alias=True)

        type_def = TypeDefinition(
            name=type_name,
            json_name=name,
            schema=go_schema,
            spec_location=SpecLocation(param.in_.lower()),
            needs_marshaler=needs_marshaler(go_schema),
            has_sensitive_data=has_sensitive_data(go_schema),
        )
        tracker.register(type_def, f'#/components/parameters/{name}')
        types.append(type_def)
        types.extend(go_schema.additional_types)

    return types


def get_components_request_bodies(
    bodies: dict[str, RequestBody | Reference] | None, options: ParseOptions
) -> list[TypeDefinition]:
    """Resolve the JSON content of every component request body into a named type."""
    types = []
    tracker = options.tracker

    for name, value in (bodies or {}).items():
        body = options.resolver.deref(value, RequestBody)
        for media_type, content in body.content.items():
            if not is_media_type_json(media_type):
                continue

            node = options.resolver.node(content.schema_)
            opts = options.with_reference(node.ref if node else '').with_path([name])
            go_schema = generate_go_schema(node, opts)
            if go_schema.is_zero:
                continue

            type_name = rename_component(name, content.schema_)
            if node is not None and node.ref:
                # the body is just the referenced schema
                if tracker.lookup_by_ref(node.ref) == type_name:
                    continue

            type_def = TypeDefinition(
                name=type_name,
                json_name=name,
                schema=go_schema,
                spec_location=SpecLocation.BODY,
                needs_marshaler=needs_marshaler(go_schema),
            )
            tracker.register(type_def, f'#/components/requestBodies/{name}')
            types.append(type_def)
            types.extend(go_schema.additional_types)

    return types


def get_components_responses(
    responses: dict[str, Response | Reference] | None, options: ParseOptions
) -> list[TypeDefinition]:
    """Resolve the JSON content of every component response into a named type.

    A response whose name is taken by a type of a different shape gets the
    ``Response`` suffix. Responses referencing a schema become aliases of it.
    """
    types = []
    tracker = options.tracker

    for name, value in (responses or {}).items():
        response = options.resolver.deref(value, Response)
        for media_type, content in (response.content or {}).items():
            if not is_media_type_json(media_type):
                continue

            node = options.resolver.node(content.schema_)
            opts = options.with_reference(node.ref if node else '').with_path([name])
            go_schema = generate_go_schema(node, opts)

            type_name = rename_component(name, content.schema_)
            existing = tracker.lookup_by_name(type_name)
            if existing is not None and (
                existing.schema.go_type != go_schema.go_type
                or (existing.schema.array_type is None) != (go_schema.array_type is None)
            ):
                type_name = tracker.generate_unique_name(type_name, ['Response'])
                logger.debug(f'Component response {name} is named {type_name}')

            if node is not None and node.ref:
                target = tracker.lookup_by_ref(node.ref) or ref_path_to_go_type(node.ref)
                go_schema = dataclasses.replace(
                    go_schema, ref_type=target, define_via_alias=True
                )

            type_def = TypeDefinition(
                name=type_name,
                json_name=name,
                schema=go_schema,
                spec_location=SpecLocation.RESPONSE,
                needs_marshaler=needs_marshaler(go_schema),
            )
            tracker.register(type_def, f'#/components/responses/{name}')
            types.append(type_def)
            types.extend(go_schema.additional_types)

    return types

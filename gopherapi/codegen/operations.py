"""Operation collection.

This module turns the operations of the document into
:class:`OperationDefinition` objects together with the named types they
need: the per-location parameter bundles, the request body and the
success and error responses.
"""

import dataclasses
import logging

from gopherapi.codegen.constraints import new_constraints
from gopherapi.codegen.context import ParseOptions
from gopherapi.codegen.extensions import (
    ExtensionKey,
    decode_extension_lenient,
)
from gopherapi.codegen.fields import (
    create_property_go_field_name,
    gen_fields_from_properties,
)
from gopherapi.codegen.naming import (
    create_operation_id,
    is_go_keyword,
    is_media_type_json,
    is_standard_component_reference,
    media_type_to_camel_case,
    ref_path_to_go_type,
)
from gopherapi.codegen.resolver import SchemaNode
from gopherapi.codegen.schema import generate_go_schema, replace_inline_types
from gopherapi.codegen.types import (
    GoSchema,
    Property,
    SpecLocation,
    TypeDefinition,
    has_sensitive_data,
    needs_marshaler,
)
from gopherapi.exceptions import CodeGenerationError
from gopherapi.openapi.models import (
    Header,
    Operation,
    Parameter,
    PathItem,
    Reference,
    RequestBody,
    Response,
    Schema,
)

__all__ = [
    'OperationDefinition',
    'ParameterDefinition',
    'ParameterEncoding',
    'RequestBodyDefinition',
    'RequestBodyEncoding',
    'RequestParametersDefinition',
    'ResponseContentDefinition',
    'ResponseDefinition',
    'combine_operation_parameters',
    'create_body_definition',
    'create_operation_definition',
    'describe_operation_parameters',
    'filter_read_only_from_required',
    'generate_params_types',
    'generate_response_headers_schema',
    'get_operation_responses',
    'is_raw_content_type',
    'param_to_go_type',
]

logger = logging.getLogger(__name__)

# Type name suffix of the parameter bundle of each location
PARAMETER_BUNDLE_SUFFIXES = {
    'path': 'Path',
    'query': 'Query',
    'header': 'Headers',
    'cookie': 'Cookies',
}

_PARAMETER_PATH_SEGMENTS = {
    'query': 'Query',
    'path': 'Path',
    'header': 'Header',
}


# ============================================================================
# Parameters
# ============================================================================


@dataclasses.dataclass(frozen=True)
class ParameterEncoding:
    """Serialization options of one parameter."""

    style: str | None = None
    explode: bool | None = None
    required: bool = False
    allow_reserved: bool = False


@dataclasses.dataclass(frozen=True)
class ParameterDefinition:
    """A parameter of an operation.

    Attributes:
        param_name: The parameter name in the document.
        in_: Where the parameter is sent: path, query, header or cookie.
        required: Whether the parameter is required.
        spec: The parameter object.
        schema: Descriptor of the parameter type.
        resolved_go_name: Go field name after conflict resolution in the bundle.
    """

    param_name: str
    in_: str
    required: bool
    spec: Parameter
    schema: GoSchema
    resolved_go_name: str = ''

    def type_def(self) -> str:
        return self.schema.type_decl()

    @property
    def go_name(self) -> str:
        if self.resolved_go_name:
            return self.resolved_go_name
        return create_property_go_field_name(self.param_name, self.spec.extensions)

    @property
    def go_variable_name(self) -> str:
        name = self.go_name[:1].lower() + self.go_name[1:]
        if is_go_keyword(name):
            name = 'p' + self.go_name
        if name[:1].isdigit():
            name = 'n' + name
        return name

    @property
    def is_json(self) -> bool:
        content = self.spec.content or {}
        return len(content) == 1 and is_media_type_json(next(iter(content)))

    @property
    def is_pass_through(self) -> bool:
        content = self.spec.content or {}
        if len(content) > 1:
            return True
        return len(content) == 1 and not self.is_json

    @property
    def is_styled(self) -> bool:
        return self.spec.schema_ is not None

    @property
    def explode(self) -> bool:
        """The explicit ``explode`` or the default of the parameter's location."""
        if self.spec.explode is not None:
            return self.spec.explode
        return self.in_ in ('query', 'cookie')


@dataclasses.dataclass(frozen=True)
class RequestParametersDefinition:
    """The parameters of one location bundled into a struct type."""

    name: str
    encoding: dict[str, ParameterEncoding]
    params: list[ParameterDefinition]
    type_def: TypeDefinition


def _deref_parameters(
    params: list[Parameter | Reference] | None, options: ParseOptions
) -> list[tuple[Parameter, str]]:
    resolved = []
    for param in params or []:
        if isinstance(param, Reference):
            resolved.append((options.resolver.resolve_parameter(param.ref), param.ref))
        else:
            resolved.append((param, ''))
    return resolved


def param_to_go_type(param: Parameter, options: ParseOptions) -> GoSchema:
    """Resolve the type of a parameter from its schema or its content.

    Content with several media types, or without a JSON one, is passed
    through as a string.

    Raises:
        CodeGenerationError: If the parameter has neither schema nor content.
    """
    if param.schema_ is None and param.content is None:
        raise CodeGenerationError(f"parameter '{param.name}' has no schema or content")

    if param.schema_ is not None:
        node = options.resolver.node(param.schema_)
        if not options.reference and node.ref:
            options = options.with_reference(node.ref)
        return generate_go_schema(node, options)

    content = param.content or {}
    media_type = content.get('application/json')
    if len(content) > 1 or media_type is None:
        return GoSchema(go_type='string', description=param.description or '')

    return generate_go_schema(options.resolver.node(media_type.schema_), options)


def describe_operation_parameters(
    params: list[Parameter | Reference] | None, options: ParseOptions
) -> list[ParameterDefinition]:
    """Describe the parameters of an operation or a path item, in declaration order."""
    out = []
    for param, param_ref in _deref_parameters(params, options):
        schema_ref = param.schema_.ref if isinstance(param.schema_, Reference) else ''
        segment = _PARAMETER_PATH_SEGMENTS.get(param.in_, 'Param')
        opts = options.with_reference(param_ref).with_path(
            options.extend_path(segment, param.name)
        )

        try:
            schema = param_to_go_type(param, opts)
        except CodeGenerationError as e:
            raise CodeGenerationError(
                f'error generating type for param ({param.name})', cause=e
            ) from e

        if param_ref.startswith('#/components/parameters/'):
            registered = options.tracker.lookup_by_ref(param_ref)
            if registered is not None:
                schema = dataclasses.replace(schema, go_type=registered, ref_type='')
        elif schema_ref and is_standard_component_reference(schema_ref):
            schema = dataclasses.replace(
                schema, go_type=ref_path_to_go_type(schema_ref), ref_type=''
            )

        out.append(
            ParameterDefinition(
                param_name=param.name,
                in_=param.in_,
                required=bool(param.required),
                spec=param,
                schema=schema,
            )
        )
    return out


def combine_operation_parameters(
    global_params: list[ParameterDefinition], local_params: list[ParameterDefinition]
) -> list[ParameterDefinition]:
    """Combine path-level and operation-level parameters.

    Operation-level parameters win over path-level ones with the same name
    and location; within each list the first occurrence wins.
    """
    seen = set()
    combined = []
    for param in [*local_params, *global_params]:
        key = (param.in_, param.param_name)
        if key in seen:
            continue
        seen.add(key)
        combined.append(param)
    return combined


def generate_params_types(
    params: list[ParameterDefinition], type_name: str, options: ParseOptions
) -> tuple[RequestParametersDefinition | None, list[TypeDefinition]]:
    """Bundle the parameters of one location into a struct type.

    Returns:
        The bundle (``None`` when there are no parameters) and the type
        definitions it needs, the bundle type last.
    """
    if not params:
        return None, []

    spec_location = SpecLocation(params[0].in_.lower())
    tracker = options.tracker

    if tracker.exists(type_name):
        type_name = tracker.generate_unique_name(type_name)

    type_defs = []
    properties = []
    encodings = {}
    resolved_params = []
    field_names: dict[str, int] = {}

    for param in params:
        schema = param.schema
        if schema.has_additional_properties:
            ref_name = f'{type_name}_{param.go_name}'
            type_def = TypeDefinition(
                name=ref_name,
                schema=param.schema,
                spec_location=spec_location,
                needs_marshaler=needs_marshaler(param.schema),
            )
            tracker.register(type_def)
            type_defs.append(type_def)
            schema = dataclasses.replace(schema, ref_type=ref_name)

        type_defs.extend(schema.additional_types)

        extensions = param.spec.extensions
        base_name = create_property_go_field_name(param.param_name, extensions)
        go_name = base_name
        if base_name in field_names:
            field_names[base_name] += 1
            go_name = f'{base_name}{field_names[base_name]}'
        else:
            field_names[base_name] = 0

        raw = (
            options.resolver.deref(param.spec.schema_, Schema)
            if param.spec.schema_ is not None
            else None
        )
        properties.append(
            Property(
                go_name=go_name,
                json_field_name=param.param_name,
                description=param.spec.description or '',
                schema=schema,
                extensions=extensions,
                constraints=new_constraints(raw, required=param.required),
                sensitive_data=decode_extension_lenient(
                    extensions, ExtensionKey.SENSITIVE_DATA
                ),
            )
        )
        encodings[param.param_name] = ParameterEncoding(
            style=param.spec.style,
            explode=param.spec.explode,
            required=param.required,
            allow_reserved=bool(param.spec.allowReserved),
        )
        resolved_params.append(dataclasses.replace(param, resolved_go_name=go_name))

    bundle = GoSchema(properties=properties)
    bundle = dataclasses.replace(
        bundle,
        go_type=bundle.create_go_struct(
            gen_fields_from_properties(properties, options.generate)
        ),
    )
    type_def = TypeDefinition(
        name=type_name,
        schema=bundle,
        spec_location=spec_location,
        has_sensitive_data=has_sensitive_data(bundle),
    )
    tracker.register(type_def)

    definition = RequestParametersDefinition(
        name=type_name,
        encoding=encodings,
        params=resolved_params,
        type_def=type_def,
    )
    return definition, [*type_defs, type_def]


# ============================================================================
# Request bodies
# ============================================================================


@dataclasses.dataclass(frozen=True)
class RequestBodyEncoding:
    """Encoding of one property of a multipart or form body."""

    content_type: str | None = None
    style: str | None = None
    explode: bool | None = None


@dataclasses.dataclass(frozen=True)
class RequestBodyDefinition:
    """The request body of an operation.

    Attributes:
        name: Name of the body type.
        required: Whether the body is required.
        schema: Descriptor of the body.
        name_tag: Tag naming the body kind, e.g. ``JSON`` or ``Multipart``.
        content_type: The media type the body is sent as.
        default: Whether this is a plain ``application/json`` body.
        encoding: Per-property encoding of multipart and form bodies.
    """

    name: str
    required: bool
    schema: GoSchema
    name_tag: str
    content_type: str
    default: bool = False
    encoding: dict[str, RequestBodyEncoding] = dataclasses.field(default_factory=dict)

    @property
    def is_optional(self) -> bool:
        return not self.schema.constraints.required


def _body_tag(content_type: str) -> str:
    if content_type == 'application/json':
        return 'JSON'
    if is_media_type_json(content_type):
        return media_type_to_camel_case(content_type)
    if content_type.startswith('multipart/'):
        return 'Multipart'
    if content_type == 'application/x-www-form-urlencoded':
        return 'Formdata'
    if content_type == 'text/plain':
        return 'Text'
    if content_type == 'text/html':
        return 'HTML'
    return 'Raw'


def filter_read_only_from_required(
    node: SchemaNode, options: ParseOptions, visited: set[str] | None = None
) -> tuple[Schema, bool]:
    """Drop readOnly properties from the required lists of a request schema.

    Inline sub-schemas (properties and combinator branches) are filtered
    recursively; referenced ones are only inspected. The document is never
    modified, a filtered copy is returned instead.

    Returns:
        The filtered schema and whether any readOnly property was required.
    """
    visited = set() if visited is None else visited
    if node.ref:
        if node.ref in visited:
            return node.schema, False
        visited.add(node.ref)

    schema = node.schema
    found = False
    update = {}

    for keyword in ('allOf', 'anyOf', 'oneOf'):
        elements = getattr(schema, keyword)
        if not elements:
            continue
        filtered_elements = []
        for element in elements:
            filtered, element_found = filter_read_only_from_required(
                options.resolver.node(element), options, visited
            )
            found = found or element_found
            filtered_elements.append(element if isinstance(element, Reference) else filtered)
        update[keyword] = filtered_elements

    if schema.properties:
        read_only = set()
        properties = {}
        for name, value in schema.properties.items():
            prop = options.resolver.node(value)
            if prop.schema.readOnly:
                read_only.add(name)
            filtered, prop_found = filter_read_only_from_required(prop, options, visited)
            found = found or prop_found
            properties[name] = value if isinstance(value, Reference) else filtered
        update['properties'] = properties

        if read_only and schema.required:
            required = [name for name in schema.required if name not in read_only]
            if len(required) != len(schema.required):
                found = True
            update['required'] = required

    if not update:
        return schema, found
    return schema.model_copy(update=update), found


def create_body_definition(
    operation_id: str, body: RequestBody | None, options: ParseOptions
) -> tuple[RequestBodyDefinition | None, TypeDefinition | None]:
    """Describe the request body of an operation.

    The first declared content type is used. Required readOnly properties
    are not required in a request; a referenced body schema having such
    properties gets its own struct instead of an alias.
    """
    if body is None or not body.content:
        return None, None

    content_type, content = next(iter(body.content.items()))
    if content.schema_ is None:
        return None, None

    tag = _body_tag(content_type)
    body_type_name = operation_id + 'Body'
    node = options.resolver.node(content.schema_)
    opts = (
        options.with_reference(node.ref)
        .with_path([body_type_name])
        .with_spec_location(SpecLocation.BODY)
    )

    filtered, has_read_only_required = filter_read_only_from_required(node, options)
    if has_read_only_required:
        logger.debug(f'Removed required readOnly properties from {body_type_name}')
        node = SchemaNode(filtered)
        opts = opts.with_reference('')

    body_schema = generate_go_schema(node, opts)

    type_def = TypeDefinition(
        name=body_type_name,
        schema=body_schema,
        spec_location=SpecLocation.BODY,
        needs_marshaler=needs_marshaler(body_schema),
        has_sensitive_data=has_sensitive_data(body_schema),
    )
    options.tracker.register(type_def)

    required = bool(body.required)
    if not body_schema.define_via_alias:
        body_schema = dataclasses.replace(body_schema, ref_type=body_type_name)
    body_schema = dataclasses.replace(
        body_schema,
        constraints=dataclasses.replace(body_schema.constraints, required=required),
    )

    encoding = {
        name: RequestBodyEncoding(
            content_type=value.contentType, style=value.style, explode=value.explode
        )
        for name, value in (content.encoding or {}).items()
    }

    definition = RequestBodyDefinition(
        name=body_type_name,
        required=required,
        schema=body_schema,
        name_tag=tag,
        content_type=content_type,
        default=content_type == 'application/json',
        encoding=encoding,
    )
    return definition, type_def


# ============================================================================
# Responses
# ============================================================================


@dataclasses.dataclass(frozen=True)
class ResponseContentDefinition:
    """One response of an operation.

    Attributes:
        response_name: Name of the response type, ``struct{}`` for no content.
        is_success: Whether the status code is 2XX.
        status_code: The status code.
        description: The response description.
        schema: Descriptor of the response body.
        ref: Type name of the component response it references, if any.
        content_type: The media type of the body.
        name_tag: Tag naming the body kind, e.g. ``JSON``.
        headers: Descriptors of the response headers.
        is_raw: Whether the body is passed through as bytes.
    """

    response_name: str
    is_success: bool
    status_code: int
    description: str = ''
    schema: GoSchema = dataclasses.field(default_factory=GoSchema)
    ref: str = ''
    content_type: str = ''
    name_tag: str = ''
    headers: dict[str, GoSchema] = dataclasses.field(default_factory=dict)
    is_raw: bool = False


@dataclasses.dataclass(frozen=True)
class ResponseDefinition:
    """The responses of an operation: the chosen success and error plus all of them."""

    success_status_code: int
    success: ResponseContentDefinition | None
    error: ResponseContentDefinition | None
    all: dict[int, ResponseContentDefinition]


def _no_content(description: str = 'No Content', status_code: int = 204, headers=None):
    return ResponseContentDefinition(
        response_name='struct{}',
        is_success=True,
        status_code=status_code,
        description=description,
        headers=headers or {},
    )


def is_raw_content_type(content_type: str) -> bool:
    """Whether a body of this media type is passed through as ``[]byte``."""
    if not content_type:
        return False
    if is_media_type_json(content_type):
        return False
    base = content_type.split(';', 1)[0].strip()
    return base not in (
        'application/json',
        'text/plain',
        'text/html',
        'application/octet-stream',
        'application/x-www-form-urlencoded',
    )


def _response_tag(content_type: str) -> str:
    tag = _body_tag(content_type)
    return '' if tag == 'Raw' else tag


def _parse_status_code(status_code: str) -> int:
    if status_code.isdigit():
        return int(status_code)
    lowered = status_code.lower()
    if lowered == '2xx':
        return 200
    if lowered in ('4xx', '5xx'):
        return 400
    raise CodeGenerationError(f'error parsing status code {status_code}')


def _deref_response(
    response: Response | Reference, options: ParseOptions
) -> tuple[Response, str]:
    if isinstance(response, Reference):
        return options.resolver.resolve_response(response.ref), response.ref
    return response, ''


def generate_response_headers_schema(
    headers: dict[str, Header | Reference] | None,
    operation_id: str,
    options: ParseOptions,
) -> dict[str, GoSchema]:
    """Resolve the types of the headers of a response, in declaration order."""
    result = {}
    for name, header in (headers or {}).items():
        if isinstance(header, Reference):
            header = options.resolver.resolve(header.ref, Header)
        opts = options.with_reference('').with_path([operation_id, 'Header', name])
        result[name] = generate_go_schema(options.resolver.node(header.schema_), opts)
    return result


def _component_response_type(name: str, options: ParseOptions) -> TypeDefinition | None:
    """The type a component response was registered as, possibly renamed with ``Response``."""
    tracker = options.tracker
    for candidate in (name, name + 'Response'):
        type_def = tracker.lookup_by_name(candidate)
        if type_def is not None and type_def.spec_location == SpecLocation.RESPONSE:
            return type_def
    return None


def _component_response_alias(
    alias_name: str, component: TypeDefinition, options: ParseOptions
) -> tuple[str, TypeDefinition | None]:
    """Alias an operation response to a component response type.

    With an error mapping configured for the alias a full type is created
    instead, so that the error method can be attached to it.
    """
    tracker = options.tracker

    if options.generate.error_mapping.get(alias_name):
        type_def = TypeDefinition(
            name=alias_name,
            schema=component.schema,
            spec_location=SpecLocation.RESPONSE,
            needs_marshaler=needs_marshaler(component.schema),
        )
        tracker.register(type_def)
        return alias_name, type_def

    existing = tracker.lookup_by_name(alias_name)
    if existing is not None:
        if existing.schema.ref_type == component.name:
            return alias_name, None
        alias_name = tracker.generate_unique_name(alias_name)

    type_def = TypeDefinition(
        name=alias_name,
        schema=GoSchema(ref_type=component.name, define_via_alias=True),
        spec_location=SpecLocation.RESPONSE,
    )
    tracker.register(type_def)
    return alias_name, type_def


def get_operation_responses(
    operation_id: str,
    responses: dict[str, Response | Reference] | None,
    options: ParseOptions,
) -> tuple[ResponseDefinition, list[TypeDefinition]]:
    """Describe the responses of an operation.

    The first success and the first error response are the ones an
    operation returns. ``2XX`` counts as 200 and ``4XX``/``5XX`` as 400;
    ``default`` becomes the 500 error response when no explicit error
    response exists. Without any success response the operation returns
    204 with no content.

    Raises:
        CodeGenerationError: If a status code cannot be parsed.
    """
    if not responses:
        success = _no_content()
        return ResponseDefinition(204, success, None, {204: success}), []

    tracker = options.tracker
    type_defs: list[TypeDefinition] = []
    all_responses: dict[int, ResponseContentDefinition] = {}
    success_code = error_code = first_success = first_error = 0
    error_alias_registered = False

    for status_code, value in responses.items():
        if status_code == 'default' or value is None:
            continue

        response, response_ref = _deref_response(value, options)
        ref_type = ''
        is_component_ref = False
        if response_ref:
            ref_type = ref_path_to_go_type(response_ref)
            is_component_ref = response_ref.startswith('#/components/')

        headers = generate_response_headers_schema(response.headers, operation_id, options)

        status = _parse_status_code(status_code)
        if 200 <= status < 300:
            is_success = True
            success_code = status
            first_success = first_success or status
        elif 300 <= status < 600:
            is_success = False
            error_code = status
            first_error = first_error or status
        else:
            continue

        content_type, content = '', None
        if response.content:
            if 'application/json' in response.content:
                content_type, content = 'application/json', response.content['application/json']
            else:
                content_type, content = next(iter(response.content.items()))

        if content is None or content.schema_ is None:
            if is_success:
                all_responses[status] = _no_content(
                    response.description or '', status, headers
                )
            continue

        type_suffix = 'Response' if is_success else 'ErrorResponse'
        path = [operation_id, type_suffix]
        is_first_of_kind = status == (first_success if is_success else first_error)
        if not is_first_of_kind:
            path.append(status_code)

        opts = (
            options.with_reference('')
            .with_path(path)
            .with_spec_location(SpecLocation.RESPONSE)
        )
        content_schema = generate_go_schema(options.resolver.node(content.schema_), opts)
        if content_schema.is_zero:
            continue

        if is_raw_content_type(content_type):
            content_schema = GoSchema(
                go_type='[]byte',
                define_via_alias=True,
                description=content_schema.description,
            )

        tag = ''
        component = _component_response_type(ref_type, options) if is_component_ref else None

        if component is not None:
            if is_success or not error_alias_registered:
                response_name, type_def = _component_response_alias(
                    operation_id + type_suffix, component, options
                )
                if type_def is not None:
                    type_defs.append(type_def)
                if not is_success:
                    error_alias_registered = True
            else:
                response_name = component.name
            content_schema = component.schema
        else:
            tag = _response_tag(content_type)
            response_name = tracker.generate_unique_name(
                operation_id + type_suffix, [tag, f'{tag}{status}']
            )

            if content_schema.array_type is not None:
                content_schema, _ = replace_inline_types(content_schema, opts)

            # Error methods cannot be attached to aliases.
            if not is_success and content_schema.define_via_alias:
                original = tracker.lookup_by_name(content_schema.go_type)
                if original is not None:
                    if options.generate.error_mapping.get(response_name):
                        content_schema = dataclasses.replace(
                            original.schema, define_via_alias=False
                        )
                else:
                    content_schema = dataclasses.replace(
                        content_schema, define_via_alias=False, is_primitive_alias=True
                    )

            type_def = TypeDefinition(
                name=response_name,
                schema=content_schema,
                spec_location=SpecLocation.RESPONSE,
                needs_marshaler=needs_marshaler(content_schema),
            )
            tracker.register(type_def)
            type_defs.append(type_def)

        all_responses[status] = ResponseContentDefinition(
            response_name=response_name,
            is_success=is_success,
            status_code=status,
            description=response.description or '',
            schema=content_schema,
            ref=ref_type,
            content_type=content_type,
            name_tag=tag,
            headers=headers,
            is_raw=is_raw_content_type(content_type),
        )

    if success_code == 0:
        success_code = 204
        all_responses[204] = _no_content()

    default = responses.get('default')
    if error_code == 0 and default is not None:
        error = _default_error_response(operation_id, default, options, type_defs)
        if error is not None:
            first_error = error.status_code
            all_responses[error.status_code] = error

    definition = ResponseDefinition(
        success_status_code=success_code,
        success=all_responses.get(success_code),
        error=all_responses.get(first_error),
        all=all_responses,
    )
    return definition, type_defs


def _default_error_response(
    operation_id: str,
    value: Response | Reference,
    options: ParseOptions,
    type_defs: list[TypeDefinition],
) -> ResponseContentDefinition | None:
    """The ``default`` response used as the 500 error response."""
    response, _ = _deref_response(value, options)
    if not response.content:
        return None

    content_type, content = next(iter(response.content.items()))
    if content.schema_ is None:
        return None

    node = options.resolver.node(content.schema_)
    opts = options.with_reference(node.ref).with_path([operation_id, 'ErrorResponse'])
    content_schema = generate_go_schema(node, opts)
    if content_schema.is_zero:
        return None

    ref_type = ''
    if node.ref:
        ref_type = ref_path_to_go_type(node.ref)
        content_schema = dataclasses.replace(content_schema, ref_type=ref_type)

    if content_schema.array_type is not None:
        content_schema, _ = replace_inline_types(content_schema, opts)

    response_name = options.tracker.generate_unique_name(operation_id + 'ErrorResponse')
    type_def = TypeDefinition(
        name=response_name,
        schema=content_schema,
        spec_location=SpecLocation.RESPONSE,
        needs_marshaler=needs_marshaler(content_schema),
    )
    options.tracker.register(type_def)
    type_defs.append(type_def)

    return ResponseContentDefinition(
        response_name=response_name,
        is_success=False,
        status_code=500,
        description=response.description or '',
        schema=content_schema,
        ref=ref_type,
        content_type=content_type,
        headers=generate_response_headers_schema(response.headers, operation_id, options),
    )


# ============================================================================
# Operations
# ============================================================================


@dataclasses.dataclass(frozen=True)
class OperationDefinition:
    """One operation of the document and the types it needs.

    Attributes:
        id: The operation identifier used as the base of its type names.
        method: The HTTP method, upper-cased.
        path: The URL path template.
        summary: The operation summary.
        description: The operation description.
        path_params: Bundle of the path parameters.
        query: Bundle of the query parameters.
        header: Bundle of the header parameters.
        cookie: Bundle of the cookie parameters.
        body: The request body.
        response: The responses.
        type_definitions: Named types created for this operation.
    """

    id: str
    method: str
    path: str
    response: ResponseDefinition
    summary: str = ''
    description: str = ''
    path_params: RequestParametersDefinition | None = None
    query: RequestParametersDefinition | None = None
    header: RequestParametersDefinition | None = None
    cookie: RequestParametersDefinition | None = None
    body: RequestBodyDefinition | None = None
    type_definitions: list[TypeDefinition] = dataclasses.field(default_factory=list)

    @property
    def requires_param_object(self) -> bool:
        """Whether parameters other than path parameters are bundled into an object."""
        return self.query is not None or self.header is not None

    @property
    def has_request_options(self) -> bool:
        return (
            self.path_params is not None
            or self.header is not None
            or self.query is not None
            or self.body is not None
        )

    @property
    def success_response_name(self) -> str:
        if self.response.success_status_code == 204 or self.response.success is None:
            return ''
        return self.response.success.response_name

    def summary_as_comment(self) -> str:
        if not self.summary:
            return ''
        lines = self.summary.removesuffix('\n').split('\n')
        return '\n'.join(f'// {line}' for line in lines)


def create_operation_definition(
    path: str,
    method: str,
    operation: Operation,
    path_item: PathItem,
    options: ParseOptions,
) -> OperationDefinition:
    """Describe one operation and create the types it needs."""
    operation_id = create_operation_id(method, path, operation.operationId)
    opts = options.with_path([operation_id]).with_reference('')

    global_params = describe_operation_parameters(path_item.parameters, opts)
    local_params = describe_operation_parameters(operation.parameters, opts)
    params = combine_operation_parameters(global_params, local_params)

    type_defs: list[TypeDefinition] = []
    bundles = {}
    for location, suffix in PARAMETER_BUNDLE_SUFFIXES.items():
        located = [p for p in params if p.in_ == location]
        bundle, bundle_types = generate_params_types(located, operation_id + suffix, opts)
        bundles[location] = bundle
        type_defs.extend(bundle_types)

    body = None
    if operation.requestBody is not None:
        body = options.resolver.deref(operation.requestBody, RequestBody)
    body_definition, body_type = create_body_definition(operation_id, body, opts)
    if body_type is not None:
        type_defs.append(body_type)

    response, response_types = get_operation_responses(
        operation_id, operation.responses, opts
    )
    type_defs.extend(response_types)

    logger.debug(f'Collected operation {operation_id} ({method.upper()} {path})')
    return OperationDefinition(
        id=operation_id,
        method=method.upper(),
        path=path,
        summary=operation.summary or '',
        description=operation.description or '',
        path_params=bundles['path'],
        query=bundles['query'],
        header=bundles['header'],
        cookie=bundles['cookie'],
        body=body_definition,
        response=response,
        type_definitions=type_defs,
    )

"""Pydantic models for OpenAPI 3.0 and 3.1 documents.

Only the parts of the document that influence type resolution are modelled
explicitly. Vendor extensions (``x-*`` keys) and any other unknown keys are
kept as extra attributes, so nothing in the source document is dropped.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag

__all__ = [
    'Components',
    'Discriminator_',
    'Encoding',
    'Header',
    'HTTP_METHODS',
    'Info',
    'MediaType',
    'OpenAPI',
    'Operation',
    'Parameter',
    'PathItem',
    'Reference',
    'RequestBody',
    'Response',
    'Schema',
    'SchemaOrRef',
]

HTTP_METHODS = ('get', 'put', 'post', 'delete', 'options', 'head', 'patch', 'trace')


def _reference_or_object(value: Any) -> str:
    """Discriminator function telling a JSON reference apart from an inline object."""
    if isinstance(value, dict):
        return 'reference' if '$ref' in value else 'object'
    if isinstance(value, Reference):
        return 'reference'
    return 'object'


class _ExtensibleModel(BaseModel):
    model_config = ConfigDict(extra='allow', populate_by_name=True)

    @property
    def extensions(self) -> dict[str, Any]:
        """Vendor extensions declared on this object, in declaration order."""
        extra = self.model_extra or {}
        return {k: v for k, v in extra.items() if k.startswith('x-')}


class Reference(BaseModel):
    """Reference object."""

    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    ref: str = Field(..., alias='$ref')
    summary: Optional[str] = None
    description: Optional[str] = None


class Discriminator_(BaseModel):
    """Discriminator object for polymorphic schemas."""

    model_config = ConfigDict(extra='allow')

    propertyName: str
    mapping: Optional[Dict[str, str]] = None


class Schema(_ExtensibleModel):
    """Schema object, covering both the 3.0 and the 3.1 (JSON Schema) dialects.

    All facets default to ``None`` so that "not declared" can be told apart
    from an explicit ``false`` or ``0``.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[Union[str, List[str]]] = None
    format: Optional[str] = None
    nullable: Optional[bool] = None

    enum: Optional[List[Any]] = None
    const: Optional[Any] = None
    default: Optional[Any] = None

    multipleOf: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    exclusiveMinimum: Optional[Union[bool, float]] = None
    exclusiveMaximum: Optional[Union[bool, float]] = None
    minLength: Optional[int] = None
    maxLength: Optional[int] = None
    pattern: Optional[str] = None
    minItems: Optional[int] = None
    maxItems: Optional[int] = None
    uniqueItems: Optional[bool] = None
    minProperties: Optional[int] = None
    maxProperties: Optional[int] = None

    properties: Optional[Dict[str, SchemaOrRef]] = None
    required: Optional[List[str]] = None
    additionalProperties: Optional[Union[bool, SchemaOrRef]] = None
    items: Optional[SchemaOrRef] = None

    allOf: Optional[List[SchemaOrRef]] = None
    anyOf: Optional[List[SchemaOrRef]] = None
    oneOf: Optional[List[SchemaOrRef]] = None
    not_: Optional[SchemaOrRef] = Field(None, alias='not')
    discriminator: Optional[Discriminator_] = None

    readOnly: Optional[bool] = None
    writeOnly: Optional[bool] = None
    deprecated: Optional[bool] = None
    example: Optional[Any] = None
    examples: Optional[Any] = None

    @property
    def types(self) -> list[str]:
        """The declared type as a list, whichever form the document used."""
        if self.type is None:
            return []
        if isinstance(self.type, str):
            return [self.type]
        return list(self.type)

    @property
    def has_nil_type(self) -> bool:
        return 'null' in self.types

    @property
    def is_null_only(self) -> bool:
        return self.types == ['null']


SchemaOrRef = Annotated[
    Union[
        Annotated[Reference, Tag('reference')],
        Annotated[Schema, Tag('object')],
    ],
    Discriminator(_reference_or_object),
]


class Encoding(BaseModel):
    """Encoding object for a single multipart or form property."""

    model_config = ConfigDict(extra='allow')

    contentType: Optional[str] = None
    style: Optional[str] = None
    explode: Optional[bool] = None
    allowReserved: Optional[bool] = None


class MediaType(_ExtensibleModel):
    """Media type object."""

    schema_: Optional[SchemaOrRef] = Field(None, alias='schema')
    example: Optional[Any] = None
    examples: Optional[Any] = None
    encoding: Optional[Dict[str, Encoding]] = None


class Header(_ExtensibleModel):
    """Header object."""

    description: Optional[str] = None
    required: Optional[bool] = None
    deprecated: Optional[bool] = None
    style: Optional[str] = None
    explode: Optional[bool] = None
    schema_: Optional[SchemaOrRef] = Field(None, alias='schema')
    content: Optional[Dict[str, MediaType]] = None


HeaderOrRef = Annotated[
    Union[
        Annotated[Reference, Tag('reference')],
        Annotated[Header, Tag('object')],
    ],
    Discriminator(_reference_or_object),
]


class Parameter(_ExtensibleModel):
    """Parameter object."""

    name: str
    in_: str = Field(..., alias='in')
    description: Optional[str] = None
    required: Optional[bool] = None
    deprecated: Optional[bool] = None
    allowEmptyValue: Optional[bool] = None
    style: Optional[str] = None
    explode: Optional[bool] = None
    allowReserved: Optional[bool] = None
    schema_: Optional[SchemaOrRef] = Field(None, alias='schema')
    content: Optional[Dict[str, MediaType]] = None
    example: Optional[Any] = None


ParameterOrRef = Annotated[
    Union[
        Annotated[Reference, Tag('reference')],
        Annotated[Parameter, Tag('object')],
    ],
    Discriminator(_reference_or_object),
]


class RequestBody(_ExtensibleModel):
    """Request body object."""

    description: Optional[str] = None
    content: Dict[str, MediaType] = Field(default_factory=dict)
    required: Optional[bool] = None


RequestBodyOrRef = Annotated[
    Union[
        Annotated[Reference, Tag('reference')],
        Annotated[RequestBody, Tag('object')],
    ],
    Discriminator(_reference_or_object),
]


class Response(_ExtensibleModel):
    """Response object."""

    description: Optional[str] = None
    headers: Optional[Dict[str, HeaderOrRef]] = None
    content: Optional[Dict[str, MediaType]] = None
    links: Optional[Dict[str, Any]] = None


ResponseOrRef = Annotated[
    Union[
        Annotated[Reference, Tag('reference')],
        Annotated[Response, Tag('object')],
    ],
    Discriminator(_reference_or_object),
]


class Operation(_ExtensibleModel):
    """Operation object describing a single API operation on a path."""

    tags: Optional[List[str]] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    operationId: Optional[str] = None
    parameters: Optional[List[ParameterOrRef]] = None
    requestBody: Optional[RequestBodyOrRef] = None
    responses: Optional[Dict[str, ResponseOrRef]] = None
    deprecated: Optional[bool] = None
    security: Optional[List[Dict[str, List[str]]]] = None


class PathItem(_ExtensibleModel):
    """Path item object."""

    summary: Optional[str] = None
    description: Optional[str] = None
    get: Optional[Operation] = None
    put: Optional[Operation] = None
    post: Optional[Operation] = None
    delete: Optional[Operation] = None
    options: Optional[Operation] = None
    head: Optional[Operation] = None
    patch: Optional[Operation] = None
    trace: Optional[Operation] = None
    parameters: Optional[List[ParameterOrRef]] = None

    def operations(self) -> list[tuple[str, Operation]]:
        """Declared operations as (method, operation) pairs in canonical method order."""
        return [
            (method, getattr(self, method))
            for method in HTTP_METHODS
            if getattr(self, method) is not None
        ]


class Components(_ExtensibleModel):
    """Reusable components."""

    schemas: Optional[Dict[str, SchemaOrRef]] = None
    responses: Optional[Dict[str, ResponseOrRef]] = None
    parameters: Optional[Dict[str, ParameterOrRef]] = None
    requestBodies: Optional[Dict[str, RequestBodyOrRef]] = None
    headers: Optional[Dict[str, HeaderOrRef]] = None
    examples: Optional[Dict[str, Any]] = None
    securitySchemes: Optional[Dict[str, Any]] = None
    links: Optional[Dict[str, Any]] = None
    callbacks: Optional[Dict[str, Any]] = None


class Info(_ExtensibleModel):
    """API metadata."""

    title: str
    version: str
    description: Optional[str] = None


class OpenAPI(_ExtensibleModel):
    """Root document object."""

    openapi: str
    info: Info
    servers: Optional[List[Dict[str, Any]]] = None
    paths: Dict[str, PathItem] = Field(default_factory=dict)
    components: Optional[Components] = None
    security: Optional[List[Dict[str, List[str]]]] = None
    tags: Optional[List[Dict[str, Any]]] = None


# Rebuild models to resolve forward references
Schema.model_rebuild()
MediaType.model_rebuild()
Header.model_rebuild()
Parameter.model_rebuild()
RequestBody.model_rebuild()
Response.model_rebuild()
Operation.model_rebuild()
PathItem.model_rebuild()
Components.model_rebuild()
OpenAPI.model_rebuild()

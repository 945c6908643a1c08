"""Schema resolution core of GopherAPI.

This module turns an OpenAPI document into Go type descriptors. It does
not render code; the result is handed to a renderer as plain data.

Main Components:
    - Collector: Resolves a whole document into a ParseResult
    - generate_go_schema: Resolves a single schema node into a GoSchema
    - generate_union: Resolves anyOf/oneOf branches into a union
    - TypeTracker: Registry of the named types of one run
    - ReferenceResolver: Resolves local $ref pointers of any depth

Example:
    >>> from gopherapi.codegen import Collector
    >>> from gopherapi.openapi import load_document
    >>>
    >>> result = Collector(load_document('./openapi.yaml')).collect()
    >>> for type_def in result.all_types():
    ...     print(type_def.name, type_def.schema.type_decl())
"""

from gopherapi.codegen.collector import (
    Collector,
    EnumDefinition,
    ParseResult,
    flatten_type_definitions,
)
from gopherapi.codegen.constraints import Constraints, new_constraints
from gopherapi.codegen.context import ParseOptions
from gopherapi.codegen.extensions import (
    ExtensionKey,
    SensitiveDataConfig,
    decode_extension,
)
from gopherapi.codegen.merge import merge_openapi_schemas
from gopherapi.codegen.operations import (
    OperationDefinition,
    RequestBodyDefinition,
    ResponseDefinition,
)
from gopherapi.codegen.resolver import ReferenceResolver, SchemaNode
from gopherapi.codegen.schema import generate_go_schema
from gopherapi.codegen.type_tracker import TypeTracker
from gopherapi.codegen.types import (
    Discriminator,
    GoSchema,
    Property,
    SpecLocation,
    TypeDefinition,
    UnionElement,
)
from gopherapi.codegen.union import generate_union

__all__ = [
    # Orchestration
    'Collector',
    'ParseResult',
    'EnumDefinition',
    'flatten_type_definitions',
    'OperationDefinition',
    'RequestBodyDefinition',
    'ResponseDefinition',
    # Resolution
    'ParseOptions',
    'ReferenceResolver',
    'SchemaNode',
    'TypeTracker',
    'generate_go_schema',
    'generate_union',
    'merge_openapi_schemas',
    # Descriptors
    'Constraints',
    'Discriminator',
    'GoSchema',
    'Property',
    'SpecLocation',
    'TypeDefinition',
    'UnionElement',
    'new_constraints',
    # Extensions
    'ExtensionKey',
    'SensitiveDataConfig',
    'decode_extension',
]

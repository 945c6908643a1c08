"""GopherAPI - Resolve OpenAPI documents into Go type definitions.

GopherAPI reads OpenAPI 3.0 and 3.1 documents and resolves every schema,
parameter, request body and response into a flat set of named Go type
descriptors, ready to be rendered by a code template.

Quick Start:
    >>> from gopherapi import Collector, load_document
    >>>
    >>> document = load_document('./openapi.yaml')
    >>> result = Collector(document).collect()
    >>> for type_def in result.all_types():
    ...     print(type_def.name, type_def.schema.type_decl())

CLI Usage:
    $ gopherapi resolve ./api.yaml
    $ gopherapi resolve ./api.yaml --config gopher.yaml
"""

from gopherapi.codegen.collector import Collector, EnumDefinition, ParseResult
from gopherapi.codegen.type_tracker import TypeTracker
from gopherapi.codegen.types import GoSchema, SpecLocation, TypeDefinition
from gopherapi.config import CodegenConfig, DocumentConfig, GenerateOptions, get_config
from gopherapi.exceptions import (
    AmbiguousDiscriminatorError,
    CodeGenerationError,
    ConfigurationError,
    DiscriminatorNotAllMappedError,
    DuplicateTypeError,
    GopherAPIError,
    MalformedReferenceError,
    OperationGenerationError,
    SchemaError,
    SchemaLoadError,
    SchemaMergeError,
    SchemaReferenceError,
    SchemaValidationError,
    TypeGenerationError,
    UnhandledTypeError,
)
from gopherapi.openapi import load_document

__all__ = [
    # Main classes
    'Collector',
    'ParseResult',
    'EnumDefinition',
    'TypeTracker',
    'GoSchema',
    'TypeDefinition',
    'SpecLocation',
    'load_document',
    # Configuration
    'CodegenConfig',
    'DocumentConfig',
    'GenerateOptions',
    'get_config',
    # Exceptions
    'GopherAPIError',
    'SchemaError',
    'SchemaLoadError',
    'SchemaValidationError',
    'SchemaReferenceError',
    'MalformedReferenceError',
    'CodeGenerationError',
    'TypeGenerationError',
    'OperationGenerationError',
    'UnhandledTypeError',
    'SchemaMergeError',
    'AmbiguousDiscriminatorError',
    'DiscriminatorNotAllMappedError',
    'DuplicateTypeError',
    'ConfigurationError',
]

try:
    from gopherapi._version import version as __version__
except ImportError:
    __version__ = 'unknown'

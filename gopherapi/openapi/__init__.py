from gopherapi.openapi.loader import DocumentLoader, load_document, parse_document
from gopherapi.openapi.models import (
    Components,
    Header,
    MediaType,
    OpenAPI,
    Operation,
    Parameter,
    PathItem,
    Reference,
    RequestBody,
    Response,
    Schema,
    SchemaOrRef,
)

__all__ = [
    # Loading
    'DocumentLoader',
    'load_document',
    'parse_document',
    # Models
    'Components',
    'Header',
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

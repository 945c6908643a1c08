"""Custom exceptions for GopherAPI.

This module defines the hierarchy of exceptions raised while loading an
OpenAPI document and resolving its schemas into Go type definitions. Every
failure is terminal for the current run; errors carry enough context (schema,
property or operation name) to locate the offending part of the document.
"""

from typing import Any


class GopherAPIError(Exception):
    """Base exception for all GopherAPI errors.

    All exceptions raised by GopherAPI inherit from this class, making it easy
    to catch all GopherAPI-related errors with a single except clause.

    Example:
        try:
            Collector(document).collect()
        except GopherAPIError as e:
            print(f"GopherAPI error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


# ============================================================================
# Document errors
# ============================================================================


class SchemaError(GopherAPIError):
    """Base exception for schema-related errors."""

    pass


class SchemaLoadError(SchemaError):
    """Failed to load an OpenAPI document from a source.

    Attributes:
        source: The source path or URL that failed to load.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, source: str, cause: Exception | None = None):
        self.source = source
        self.cause = cause
        message = f"Failed to load schema from '{source}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class SchemaValidationError(SchemaError):
    """Document failed OpenAPI model validation.

    Attributes:
        source: The source path or URL of the invalid document.
        errors: List of validation error messages.
    """

    def __init__(self, source: str, errors: list[str] | None = None):
        self.source = source
        self.errors = errors or []
        message = f"Schema validation failed for '{source}'"
        if errors:
            message += f': {"; ".join(errors)}'
        super().__init__(message)


class SchemaReferenceError(SchemaError):
    """Failed to resolve a $ref reference in the document.

    Attributes:
        reference: The $ref string that could not be resolved.
        reason: Explanation of why the reference couldn't be resolved.
    """

    def __init__(self, reference: str, reason: str | None = None):
        self.reference = reference
        self.reason = reason
        message = f"Failed to resolve reference '{reference}'"
        if reason:
            message += f': {reason}'
        super().__init__(message)


class MalformedReferenceError(SchemaReferenceError):
    """A component reference does not have the expected structural depth.

    Attributes:
        depth: The number of '/'-separated parts found in the reference.
    """

    def __init__(self, reference: str, depth: int):
        self.depth = depth
        super().__init__(
            reference, f'unexpected reference depth: {depth} for ref: {reference}'
        )


# ============================================================================
# Resolution errors
# ============================================================================


class CodeGenerationError(GopherAPIError):
    """Error while resolving the document into type definitions.

    Attributes:
        context: Additional context about what was being resolved.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self, message: str, context: str | None = None, cause: Exception | None = None
    ):
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f'{message} (while generating {context})'
        if cause:
            full_message += f': {cause}'
        super().__init__(full_message)


class TypeGenerationError(CodeGenerationError):
    """Error generating a type from a schema.

    Attributes:
        type_name: The name of the type being generated.
        schema_path: The path to the schema in the OpenAPI document.
    """

    def __init__(
        self,
        type_name: str,
        schema_path: str | None = None,
        cause: Exception | None = None,
    ):
        self.type_name = type_name
        self.schema_path = schema_path
        message = f"Failed to generate type '{type_name}'"
        if schema_path:
            message += f" at '{schema_path}'"
        super().__init__(message, context=type_name, cause=cause)


class UnhandledTypeError(CodeGenerationError):
    """A schema declares a kind that has no Go mapping.

    Attributes:
        kind: The declared OpenAPI type list.
    """

    def __init__(self, kind: Any):
        self.kind = kind
        super().__init__(f'unhandled GoSchema type: {kind}')


class SchemaMergeError(CodeGenerationError):
    """Two allOf branches declare conflicting facet values.

    Attributes:
        facet: The name of the conflicting facet.
    """

    def __init__(self, facet: str, message: str | None = None):
        self.facet = facet
        super().__init__(message or f'merging two schemas with different {facet}')


class AmbiguousDiscriminatorError(CodeGenerationError):
    """An inline union branch cannot be mapped while an explicit mapping exists."""

    def __init__(self):
        super().__init__(
            'ambiguous discriminator.mapping: please replace inlined object with $ref'
        )


class DiscriminatorNotAllMappedError(CodeGenerationError):
    """The discriminator mapping does not cover every union branch.

    Attributes:
        mapped: Number of distinct mapped discriminator values.
        expected: Number of union branches.
    """

    def __init__(self, mapped: int, expected: int):
        self.mapped = mapped
        self.expected = expected
        super().__init__(
            f'discriminator: not all schemas were mapped ({mapped} of {expected})'
        )


class TypeLookupError(CodeGenerationError):
    """A type name was requested that was never registered.

    Attributes:
        name: The missing type name.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"type '{name}' is not registered")


class DuplicateTypeError(CodeGenerationError):
    """Two different type definitions were produced under the same name.

    Attributes:
        name: The conflicting type name.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"duplicate type definition '{name}' with different content")


class ExtensionValueError(CodeGenerationError):
    """A vendor extension carries a value of the wrong shape.

    Attributes:
        key: The extension key.
        value: The offending value.
    """

    def __init__(self, key: str, value: Any):
        self.key = key
        self.value = value
        super().__init__(
            f"invalid value for '{key}': failed to convert type: {type(value).__name__}"
        )


class OperationGenerationError(CodeGenerationError):
    """Error resolving the types of one operation.

    Attributes:
        operation_id: The operationId of the endpoint.
        method: The HTTP method of the endpoint.
        path: The URL path of the endpoint.
    """

    def __init__(
        self,
        operation_id: str,
        method: str | None = None,
        path: str | None = None,
        cause: Exception | None = None,
    ):
        self.operation_id = operation_id
        self.method = method
        self.path = path
        message = f"Failed to generate operation '{operation_id}'"
        if method and path:
            message += f' ({method.upper()} {path})'
        super().__init__(message, context=operation_id, cause=cause)


# ============================================================================
# Configuration errors
# ============================================================================


class ConfigurationError(GopherAPIError):
    """Error in configuration.

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)

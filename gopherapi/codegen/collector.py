"""Collection of every type definition and operation of a document."""

import dataclasses
import logging
from collections.abc import Iterable

from gopherapi.codegen.components import (
    get_components_parameters,
    get_components_request_bodies,
    get_components_responses,
    get_components_schemas,
    pre_register_components,
)
from gopherapi.codegen.context import ParseOptions
from gopherapi.codegen.operations import OperationDefinition, create_operation_definition
from gopherapi.codegen.resolver import ReferenceResolver
from gopherapi.codegen.type_tracker import TypeTracker
from gopherapi.codegen.types import GoSchema, SpecLocation, TypeDefinition
from gopherapi.config import GenerateOptions
from gopherapi.exceptions import (
    CodeGenerationError,
    DuplicateTypeError,
    OperationGenerationError,
    SchemaReferenceError,
    TypeGenerationError,
)
from gopherapi.openapi.models import OpenAPI

__all__ = [
    'Collector',
    'EnumDefinition',
    'ParseResult',
    'collect_enums',
    'flatten_type_definitions',
]

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class EnumDefinition:
    """An enum type and how its constants are rendered.

    Attributes:
        type_name: Name of the enum type.
        schema: Descriptor of the enum type.
        value_wrapper: Quote put around the literals, ``"`` for string enums.
        prefix_type_name: Whether constant names must be prefixed by the type name.
    """

    type_name: str
    schema: GoSchema
    value_wrapper: str = ''
    prefix_type_name: bool = False

    @property
    def values(self) -> dict[str, str]:
        return self.schema.enum_values


@dataclasses.dataclass
class ParseResult:
    """Everything resolved from one document.

    Attributes:
        operations: The operations, in document order.
        type_definitions: Named types grouped by the section they come from.
        union_types: Named types created for unions and hoisted inline types.
        enums: The enum types.
        response_errors: Names of the types that implement the error interface.
        type_tracker: The registry of the run.
    """

    operations: list[OperationDefinition]
    type_definitions: dict[SpecLocation, list[TypeDefinition]]
    union_types: list[TypeDefinition]
    enums: list[EnumDefinition]
    response_errors: list[str]
    type_tracker: TypeTracker

    def all_types(self) -> list[TypeDefinition]:
        """Every named type, grouped types first, then union types."""
        result = []
        for type_defs in self.type_definitions.values():
            result.extend(type_defs)
        result.extend(self.union_types)
        return result

    @property
    def type_schemas(self) -> dict[str, GoSchema]:
        """Type name mapped to its descriptor, for following references."""
        return {type_def.name: type_def.schema for type_def in self.all_types()}


class Collector:
    """Resolves a document into type definitions and operations.

    Every call of :meth:`collect` starts from a fresh type tracker, so the
    result is a pure function of the document and the options.

    Example:
        >>> document = load_document('openapi.yaml')
        >>> result = Collector(document).collect()
        >>> [t.name for t in result.type_definitions[SpecLocation.SCHEMA]]
        ['Pet', 'Pets']
    """

    def __init__(self, document: OpenAPI, options: GenerateOptions | None = None):
        """Initialize the collector.

        Args:
            document: The document to resolve.
            options: Resolution options; defaults are used when omitted.
        """
        self.document = document
        self.options = options or GenerateOptions()

    def collect(self) -> ParseResult:
        """Resolve the whole document.

        Raises:
            TypeGenerationError: If a component cannot be resolved.
            OperationGenerationError: If an operation cannot be resolved.
            DuplicateTypeError: If two different types end up with the same name.
        """
        tracker = TypeTracker()
        options = ParseOptions(
            generate=self.options,
            tracker=tracker,
            resolver=ReferenceResolver(self.document),
        )

        components = self.document.components
        pre_register_components(components, options)

        type_defs = self._collect_components(options)

        operations = []
        for path, path_item in self.document.paths.items():
            for method, operation in path_item.operations():
                try:
                    op = create_operation_definition(
                        path, method, operation, path_item, options
                    )
                except (CodeGenerationError, SchemaReferenceError) as e:
                    raise OperationGenerationError(
                        operation.operationId or f'{method} {path}',
                        method=method,
                        path=path,
                        cause=e,
                    ) from e
                operations.append(op)
                type_defs.extend(op.type_definitions)

        all_types = flatten_type_definitions(type_defs)

        for operation in operations:
            error = operation.response.error
            if error is not None and error.response_name != 'struct{}':
                tracker.mark_needs_error_method(error.response_name)
        for name in self.options.error_mapping:
            tracker.mark_needs_error_method(name)

        grouped: dict[SpecLocation, list[TypeDefinition]] = {}
        union_types = []
        for type_def in all_types:
            location = type_def.spec_location or SpecLocation.SCHEMA
            if location == SpecLocation.UNION:
                union_types.append(type_def)
            else:
                grouped.setdefault(location, []).append(type_def)

        logger.debug(
            f'Collected {len(all_types)} types and {len(operations)} operations'
        )
        return ParseResult(
            operations=operations,
            type_definitions=grouped,
            union_types=union_types,
            enums=collect_enums(all_types),
            response_errors=tracker.error_types,
            type_tracker=tracker,
        )

    def _collect_components(self, options: ParseOptions) -> list[TypeDefinition]:
        components = self.document.components
        if components is None:
            return []

        type_defs = []
        sections = (
            ('schemas', components.schemas, get_components_schemas),
            ('parameters', components.parameters, get_components_parameters),
            ('requestBodies', components.requestBodies, get_components_request_bodies),
            ('responses', components.responses, get_components_responses),
        )
        for section, values, collect in sections:
            # one component at a time, so that errors name the component
            for name, value in (values or {}).items():
                try:
                    type_defs.extend(collect({name: value}, options))
                except (CodeGenerationError, SchemaReferenceError) as e:
                    raise TypeGenerationError(
                        name, schema_path=f'#/components/{section}/{name}', cause=e
                    ) from e
        return type_defs


def flatten_type_definitions(type_defs: Iterable[TypeDefinition]) -> list[TypeDefinition]:
    """Flatten type definitions and the auxiliary types they carry, in order.

    A name seen twice with the same declaration is kept once.

    Raises:
        DuplicateTypeError: If a name is seen twice with different declarations.
    """
    result: list[TypeDefinition] = []
    seen: dict[str, TypeDefinition] = {}

    def visit(type_def: TypeDefinition) -> None:
        existing = seen.get(type_def.name)
        if existing is not None:
            if existing is type_def:
                return
            if existing.schema.type_decl() != type_def.schema.type_decl():
                raise DuplicateTypeError(type_def.name)
            return

        seen[type_def.name] = type_def
        result.append(type_def)
        for additional in type_def.schema.additional_types:
            visit(additional)

    for type_def in type_defs:
        visit(type_def)
    return result


def collect_enums(type_defs: list[TypeDefinition]) -> list[EnumDefinition]:
    """Describe every enum type and decide whether its constants need the type prefix.

    Constants are prefixed when they collide with the constants of another
    enum, with the name of a non-enum type or with the enum's own name.
    """
    enums = []
    for type_def in type_defs:
        schema = type_def.schema
        if not schema.enum_values:
            continue
        enums.append(
            EnumDefinition(
                type_name=type_def.name,
                schema=schema,
                value_wrapper='"' if schema.go_type == 'string' else '',
            )
        )

    type_names = {t.name for t in type_defs if not t.schema.enum_values}
    prefixed = set()
    for i, first in enumerate(enums):
        for second in enums[i + 1 :]:
            if set(first.values) & set(second.values):
                prefixed.update([first.type_name, second.type_name])

        if set(first.values) & type_names or first.type_name in first.values:
            prefixed.add(first.type_name)

    return [
        dataclasses.replace(enum, prefix_type_name=True)
        if enum.type_name in prefixed
        else enum
        for enum in enums
    ]

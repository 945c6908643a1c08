"""Local JSON-pointer reference resolution over the document model.

References of any depth are supported (``#/components/schemas/Pet`` as
well as ``#/paths/~1pets/get/responses/200/content/application~1json/schema``).
Remote and relative file references are rejected.
"""

import dataclasses
import logging
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from gopherapi.exceptions import SchemaReferenceError
from gopherapi.openapi.models import (
    OpenAPI,
    Parameter,
    Reference,
    RequestBody,
    Response,
    Schema,
    SchemaOrRef,
)

__all__ = ['ReferenceResolver', 'SchemaNode']

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)

_SCHEMA_ADAPTER = TypeAdapter(SchemaOrRef)


@dataclasses.dataclass(frozen=True)
class SchemaNode:
    """A resolved schema together with the reference it was reached through.

    Attributes:
        schema: The resolved schema.
        ref: The ``$ref`` the schema was reached through, empty for inline schemas.
    """

    schema: Schema
    ref: str = ''


class ReferenceResolver:
    """Resolves ``$ref`` strings against one document.

    Example:
        >>> resolver = ReferenceResolver(document)
        >>> pet = resolver.resolve_schema('#/components/schemas/Pet')
        >>> node = resolver.node(document.components.schemas['Pet'])
    """

    def __init__(self, document: OpenAPI):
        self.document = document
        self._cache: dict[str, Any] = {}

    def node(self, value: Schema | Reference | None) -> SchemaNode | None:
        """Wrap a schema slot of the document into a :class:`SchemaNode`.

        Returns:
            ``None`` for an empty slot.
        """
        if value is None:
            return None
        if isinstance(value, Reference):
            return SchemaNode(self.resolve_schema(value.ref), value.ref)
        return SchemaNode(value)

    def resolve_schema(self, ref: str) -> Schema:
        return self.resolve(ref, Schema)

    def resolve_parameter(self, ref: str) -> Parameter:
        return self.resolve(ref, Parameter)

    def resolve_request_body(self, ref: str) -> RequestBody:
        return self.resolve(ref, RequestBody)

    def resolve_response(self, ref: str) -> Response:
        return self.resolve(ref, Response)

    def deref(self, value: T | Reference, expected: type[T]) -> T:
        """Return ``value`` itself, or the object its reference points at."""
        if isinstance(value, Reference):
            return self.resolve(value.ref, expected)
        return value

    def resolve(self, ref: str, expected: type[T]) -> T:
        """Resolve a reference, following reference chains.

        Args:
            ref: The ``$ref`` string.
            expected: The model class the target must be.

        Raises:
            SchemaReferenceError: If the reference is not local, points
                nowhere, forms a cycle or targets the wrong kind of object.
        """
        seen = []
        current = ref
        while True:
            if current in seen:
                chain = ' -> '.join([*seen, current])
                raise SchemaReferenceError(ref, f'circular reference chain: {chain}')
            seen.append(current)

            target = self._lookup(current, expected)
            if isinstance(target, Reference):
                current = target.ref
                continue
            if not isinstance(target, expected):
                raise SchemaReferenceError(
                    ref, f'expected {expected.__name__}, found {type(target).__name__}'
                )
            return target

    def _lookup(self, ref: str, expected: type[BaseModel]) -> Any:
        cache_key = f'{expected.__name__}:{ref}'
        if cache_key in self._cache:
            return self._cache[cache_key]

        if not ref.startswith('#'):
            raise SchemaReferenceError(ref, 'only local references are supported')

        current: Any = self.document
        for part in _pointer_parts(ref):
            current = _step(current, part)
            if current is None:
                raise SchemaReferenceError(ref, f"'{part}' not found")

        if isinstance(current, dict):
            current = _validate_raw(ref, current, expected)

        self._cache[cache_key] = current
        return current


def _pointer_parts(ref: str) -> list[str]:
    pointer = ref[1:]
    return [
        part.replace('~1', '/').replace('~0', '~') for part in pointer.split('/') if part
    ]


def _step(current: Any, part: str) -> Any:
    if isinstance(current, BaseModel):
        for name, field in type(current).model_fields.items():
            if part in (name, field.alias):
                return getattr(current, name)
        return (current.model_extra or {}).get(part)
    if isinstance(current, dict):
        return current.get(part)
    if isinstance(current, list):
        try:
            return current[int(part)]
        except (ValueError, IndexError):
            return None
    return None


def _validate_raw(ref: str, value: dict, expected: type[BaseModel]) -> Any:
    """Turn a raw mapping found under an unmodelled key into a model."""
    try:
        if '$ref' in value:
            return Reference.model_validate(value)
        if expected is Schema:
            return _SCHEMA_ADAPTER.validate_python(value)
        return expected.model_validate(value)
    except ValidationError as e:
        raise SchemaReferenceError(ref, f'invalid {expected.__name__}: {e}') from e

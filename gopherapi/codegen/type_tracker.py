"""Type tracker for managing named Go types during resolution.

This module provides the TypeTracker class, the registry of every named type
created while resolving one document. It maps type names to definitions and
document references to the names assigned to them, and hands out unique
names when a derived name is already taken.
"""

import logging
from collections.abc import Iterator

from gopherapi.codegen.types import TypeDefinition
from gopherapi.exceptions import TypeLookupError

__all__ = ['TypeTracker']

logger = logging.getLogger(__name__)


class TypeTracker:
    """Registry of named types for one resolution run.

    A fresh tracker is created for every run and passed explicitly through
    the resolver; it is never shared between documents.

    Example:
        >>> tracker = TypeTracker()
        >>> tracker.register(TypeDefinition(name='Pet'), '#/components/schemas/Pet')
        >>> tracker.lookup_by_ref('#/components/schemas/Pet')
        'Pet'
        >>> tracker.generate_unique_name('Pet')
        'Pet0'
    """

    def __init__(self, default_suffixes: list[str] | None = None):
        """Initialize an empty tracker.

        Args:
            default_suffixes: Suffixes tried, in order, before falling back
                to numeric suffixes when a name is taken.
        """
        self._by_name: dict[str, TypeDefinition] = {}
        self._by_ref: dict[str, str] = {}  # reference -> name mapping
        self._counters: dict[str, int] = {}
        self._needs_error_method: set[str] = set()
        self.default_suffixes = list(default_suffixes or [])

    def register(self, type_def: TypeDefinition, ref: str = '') -> None:
        """Store a type definition, overwriting any definition of the same name.

        Args:
            type_def: The definition to store.
            ref: The document reference the definition was created from, if any.
        """
        self._by_name[type_def.name] = type_def
        if ref:
            self._by_ref[ref] = type_def.name

    def register_name(self, name: str) -> None:
        """Reserve a name without a full definition. Existing entries are kept."""
        if name not in self._by_name:
            self._by_name[name] = TypeDefinition(name=name)

    def register_ref(self, ref: str, name: str) -> None:
        """Map a reference to a name ahead of resolving it, for forward references."""
        self._by_ref[ref] = name

    def lookup_by_name(self, name: str) -> TypeDefinition | None:
        return self._by_name.get(name)

    def lookup_by_ref(self, ref: str) -> str | None:
        return self._by_ref.get(ref)

    def require(self, name: str) -> TypeDefinition:
        """Return the definition of ``name``.

        Raises:
            TypeLookupError: If nothing was registered under the name.
        """
        type_def = self._by_name.get(name)
        if type_def is None:
            raise TypeLookupError(name)
        return type_def

    def exists(self, name: str) -> bool:
        return name in self._by_name

    def generate_unique_name(
        self, base_name: str, suffixes: list[str] | None = None
    ) -> str:
        """Return ``base_name`` or the first free variant of it.

        Suffixes are tried first, then ``base_name`` followed by a counter.
        The counter of a base name only grows, so an issued number is never
        handed out twice.

        Args:
            base_name: The preferred name.
            suffixes: Suffixes to try before numbers; defaults to the
                tracker's default suffixes.
        """
        if not self.exists(base_name):
            return base_name

        for suffix in self.default_suffixes if suffixes is None else suffixes:
            name = base_name + suffix
            if not self.exists(name):
                return name

        counter = self._counters.get(base_name, 0)
        while True:
            name = f'{base_name}{counter}'
            if not self.exists(name):
                self._counters[base_name] = counter + 1
                return name
            counter += 1

    def generate_unique_base_name(self, base_name: str, suffix: str) -> str:
        """Find a base name whose derived ``base + suffix`` name is free.

        Returns the base (``Foo``, ``Foo1``, ``Foo2`` ...), not the derived name.
        """
        if not self.exists(base_name + suffix):
            return base_name

        counter = 1
        while True:
            candidate = f'{base_name}{counter}'
            if not self.exists(candidate + suffix):
                return candidate
            counter += 1

    def resolve_alias_chain(self, name: str) -> str:
        """Follow alias definitions to the type they finally point at.

        A cyclic chain stops at the first name seen twice.
        """
        visited = set()
        current = name
        while current not in visited:
            visited.add(current)
            type_def = self._by_name.get(current)
            if type_def is None:
                return current
            target = type_def.schema.ref_type or type_def.schema.go_type
            if not target or not type_def.schema.define_via_alias:
                return current
            current = target
        return current

    def mark_needs_error_method(self, name: str) -> None:
        """Mark the type behind ``name`` as implementing the error interface.

        ``any`` types are skipped since methods cannot be attached to them.
        """
        actual = self.resolve_alias_chain(name)
        type_def = self._by_name.get(actual)
        if type_def is not None and type_def.schema.is_any_type:
            logger.debug(f'Not marking {actual} as error type, it is untyped')
            return
        self._needs_error_method.add(actual)

    def needs_error_method(self, name: str) -> bool:
        return name in self._needs_error_method

    @property
    def error_types(self) -> list[str]:
        """Names marked as needing an error method, sorted."""
        return sorted(self._needs_error_method)

    def as_dict(self) -> dict[str, TypeDefinition]:
        return dict(self._by_name)

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self) -> Iterator[TypeDefinition]:
        return iter(self._by_name.values())

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

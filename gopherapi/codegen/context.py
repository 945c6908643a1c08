"""Context carried through every recursive resolution call."""

import contextlib
import dataclasses
from collections.abc import Iterator

from gopherapi.codegen.resolver import ReferenceResolver
from gopherapi.codegen.type_tracker import TypeTracker
from gopherapi.codegen.types import SpecLocation
from gopherapi.config import GenerateOptions

__all__ = ['ParseOptions']


@dataclasses.dataclass(frozen=True)
class ParseOptions:
    """Immutable resolution context.

    Every ``with_*`` method returns a copy; the tracker, the resolver and
    the visited set are shared between all copies of one run.

    Attributes:
        generate: User options steering the resolution.
        tracker: Registry of named types of the run.
        resolver: Reference resolver of the document.
        reference: The reference the current node was reached through.
        path: Structural path used to name anonymous nested types.
        spec_location: Document section being resolved.
        visited: References currently being resolved, for cycle detection.
    """

    generate: GenerateOptions
    tracker: TypeTracker
    resolver: ReferenceResolver
    reference: str = ''
    path: tuple[str, ...] = ()
    spec_location: SpecLocation | None = None
    visited: set[str] = dataclasses.field(default_factory=set, compare=False)

    def with_reference(self, reference: str) -> 'ParseOptions':
        return dataclasses.replace(self, reference=reference)

    def with_path(self, path: list[str] | tuple[str, ...]) -> 'ParseOptions':
        return dataclasses.replace(self, path=tuple(path))

    def with_spec_location(self, spec_location: SpecLocation | None) -> 'ParseOptions':
        return dataclasses.replace(self, spec_location=spec_location)

    def extend_path(self, *segments: str) -> tuple[str, ...]:
        return (*self.path, *segments)

    @contextlib.contextmanager
    def visiting(self, key: str) -> Iterator[None]:
        """Mark ``key`` as being resolved for the duration of the block.

        The mark is removed on every exit, including exceptions, so sibling
        subtrees never see each other's marks.
        """
        self.visited.add(key)
        try:
            yield
        finally:
            self.visited.discard(key)

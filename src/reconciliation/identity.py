"""Identity-resolution tables used during reconciliation.

``PersonIdentityTable`` merges person references seen under different
surface forms ("Mark Duvall", "mark duvall ", "Mark"). ``KeyedRegistry``
is the flat first-seen-wins table used for entities and locations. Both
allocate sequential 1-based identifiers in insertion order and live for
exactly one reconciliation run.
"""

from collections.abc import Callable
from typing import Generic, TypeVar

from src.extraction.models import PersonReference
from src.utils.logger import get_logger

from .records import Person

logger = get_logger(__name__)

T = TypeVar("T")


def person_key(name: str) -> str:
    """Identity key of a person name: trimmed and lowercased."""
    return name.strip().lower()


def is_single_token(name: str) -> bool:
    """Whether ``name`` has no internal whitespace."""
    return len(name.split()) == 1


class PersonIdentityTable:
    """Accumulates deduplicated people for one reconciliation run.

    A reference resolves, in order, by exact identity key, then (for
    single-token names only) by a unique first-name match against the
    people already present. A single token that matches the first name of
    several people is ambiguous: it is neither merged nor recorded.
    """

    def __init__(self) -> None:
        self._by_key: dict[str, Person] = {}
        self._next_id = 1

    @property
    def people(self) -> list[Person]:
        """Resolved people in identifier order."""
        return list(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)

    def first_name_matches(self, name: str) -> list[Person]:
        """People whose first name token equals ``name`` case-insensitively."""
        token = person_key(name)
        return [
            person
            for person in self._by_key.values()
            if person.full_name.split()[0].lower() == token
        ]

    def find(self, name: str, allow_first_name: bool = False) -> Person | None:
        """Look up an existing person without creating one.

        Args:
            name: Reference name.
            allow_first_name: Fall back to a unique first-name match for
                single-token names.

        Returns:
            The matching person, or ``None`` if absent or ambiguous.
        """
        name = name.strip()
        if not name:
            return None
        person = self._by_key.get(person_key(name))
        if person is not None or not allow_first_name or not is_single_token(name):
            return person
        candidates = self.first_name_matches(name)
        return candidates[0] if len(candidates) == 1 else None

    def resolve(self, reference: PersonReference) -> Person | None:
        """Resolve a reference to a person, creating one when it is new.

        The first-seen display name is kept. A later email only fills a
        missing one and never replaces an existing value.

        Returns:
            The resolved person, or ``None`` for empty or ambiguous names.
        """
        name = reference.name.strip()
        if not name:
            return None

        key = person_key(name)
        person = self._by_key.get(key)

        if person is None and is_single_token(name):
            candidates = self.first_name_matches(name)
            if len(candidates) > 1:
                logger.debug(
                    "Ambiguous first name %r matches %d people, not merged",
                    name,
                    len(candidates),
                )
                return None
            if candidates:
                person = candidates[0]

        if person is None:
            person = Person(
                person_id=self._next_id,
                full_name=name,
                email_address=reference.email,
            )
            self._by_key[key] = person
            self._next_id += 1
        elif person.email_address is None and reference.email:
            person.email_address = reference.email

        return person


class KeyedRegistry(Generic[T]):
    """First-seen-wins table keyed by a normalized identity string."""

    def __init__(self) -> None:
        self._by_key: dict[str, T] = {}

    def get_or_create(self, key: str, build: Callable[[int], T]) -> T:
        """Return the record for ``key``, building it with the next id if new.

        Args:
            key: Normalized identity key.
            build: Called with the new 1-based identifier.
        """
        record = self._by_key.get(key)
        if record is None:
            record = build(len(self._by_key) + 1)
            self._by_key[key] = record
        return record

    def values(self) -> list[T]:
        return list(self._by_key.values())

"""
Indexed Sequence - Generic Container

List-like collection with Python-style negative indexing and a few
convenience operations for beginners (sort, reverse, shuffle, join, max).

Elements must support a total order through ``<``; this is expressed as a
structural Protocol bound on the type variable, not as a base class.
"""

from typing import Any, Generic, Iterable, Iterator, List, Optional, Protocol, TypeVar
import random

from problems import (
    ConcurrentModificationError,
    EmptyCollectionError,
    check_in_range,
    check_not_none,
)


class SupportsLessThan(Protocol):
    def __lt__(self, other: Any) -> bool: ...


E = TypeVar("E", bound=SupportsLessThan)


class IndexedSequence(Generic[E]):
    """Insertion-ordered sequence of non-None elements

    Indices follow Python conventions: valid indices are [-size, size),
    with -1 addressing the last element and -size the first.

    Iteration is lazy and restartable. Mutating the sequence (append, set,
    clear, sort, reverse, shuffle) while an iterator is outstanding makes
    that iterator raise ConcurrentModificationError on its next step.
    Not safe for concurrent use from several threads.
    """

    def __init__(self, values: Optional[Iterable[E]] = None):
        self._items: List[E] = []
        self._version = 0
        if values is not None:
            for value in values:
                self.append(value)

    # ========================================================================
    # Growth and Queries
    # ========================================================================

    def append(self, value: E) -> None:
        """Append value to the end of the sequence

        Raises:
            InvalidArgumentError: If value is None
        """
        check_not_none(value, "element that is added")

        self._items.append(value)
        self._modified()

    add = append

    def size(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def get(self, index: int) -> E:
        """Element at index; negative indices count from the end

        Raises:
            OutOfRangeError: If index is outside [-size, size)
        """
        return self._items[self._resolve_index(index)]

    def set(self, index: int, value: E) -> E:
        """Replace element at index; negative indices count from the end

        Returns:
            Element previously stored at index

        Raises:
            OutOfRangeError: If index is outside [-size, size)
            InvalidArgumentError: If value is None
        """
        position = self._resolve_index(index)
        check_not_none(value, "new element")

        previous = self._items[position]
        self._items[position] = value
        self._modified()
        return previous

    def clear(self) -> None:
        self._items.clear()
        self._modified()

    def max(self) -> E:
        """Largest element; the leftmost one when several compare equal

        Raises:
            EmptyCollectionError: If the sequence is empty
        """
        if not self._items:
            raise EmptyCollectionError("Cannot find maximum for empty sequence.")

        best = self._items[0]
        for candidate in self._items[1:]:
            if best < candidate:
                best = candidate
        return best

    # ========================================================================
    # In-Place Reordering
    # ========================================================================

    def sort(self) -> None:
        """Sort ascending in natural order (stable)"""
        self._items.sort()
        self._modified()

    def reverse(self) -> None:
        self._items.reverse()
        self._modified()

    def shuffle(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        """Randomly permute the elements in place

        Args:
            seed: Seed for a fresh random.Random, for reproducible order
            rng: Random source to use; takes precedence over seed
        """
        if rng is None:
            rng = random.Random(seed) if seed is not None else random
        rng.shuffle(self._items)
        self._modified()

    # ========================================================================
    # String Forms
    # ========================================================================

    def join(self, delimiter: str) -> str:
        """Stringify elements and join them with delimiter

        Raises:
            InvalidArgumentError: If delimiter is None

        Examples:
            >>> IndexedSequence(["A", "B", "C"]).join("-")
            'A-B-C'
        """
        check_not_none(delimiter, "separator")

        return delimiter.join(str(item) for item in self._items)

    def __str__(self) -> str:
        return f"[{self.join(',')}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"

    # ========================================================================
    # Python Protocols
    # ========================================================================

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> E:
        return self.get(index)

    def __setitem__(self, index: int, value: E) -> None:
        self.set(index, value)

    def __iter__(self) -> Iterator[E]:
        # Snapshot now, not on the first next()
        version = self._version

        def walk() -> Iterator[E]:
            position = 0
            while True:
                if self._version != version:
                    raise ConcurrentModificationError(
                        f"{type(self).__name__} was modified during iteration."
                    )
                if position >= len(self._items):
                    return
                yield self._items[position]
                position += 1

        return walk()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexedSequence):
            return NotImplemented
        return self._items == other._items

    __hash__ = None  # type: ignore[assignment]

    # ========================================================================
    # Helpers
    # ========================================================================

    def _resolve_index(self, index: int) -> int:
        size = len(self._items)
        check_in_range(f"{type(self).__name__} index", index, -size, size)
        return index if index >= 0 else size + index

    def _modified(self) -> None:
        self._version += 1


class IntList(IndexedSequence[int]):
    """Sequence of integers"""

    @classmethod
    def create(cls, *values: int) -> 'IntList':
        """Create a list populated with the given values

        Examples:
            >>> str(IntList.create(3, 1, 2))
            '[3,1,2]'
        """
        return cls(values)

"""
Problems - Error Kinds

Exception hierarchy shared by the image and list modules, plus the two
argument checks every public operation starts with.

Each error kind also derives from the closest builtin exception, so callers
can catch either ``OutOfRangeError`` or plain ``ValueError``.
"""

from typing import Any


class Problem(Exception):
    """Base class for every error raised by this library"""


class OutOfRangeError(Problem, ValueError, IndexError):
    """Index, coordinate, dimension or channel outside its documented bounds"""


class InvalidArgumentError(Problem, ValueError):
    """Required value is missing (None)"""


class UnsupportedFormatError(Problem, ValueError):
    """File name or format hint does not map to a known image format"""


class EmptyCollectionError(Problem, ValueError):
    """Query needs at least one element but the collection is empty"""


class DecodeError(Problem, OSError):
    """Image source is missing, unreadable or not an image"""


class EncodeError(Problem, OSError):
    """Image or video encoder failed to write its output"""


class ConcurrentModificationError(Problem, RuntimeError):
    """Collection was mutated while an iterator over it was outstanding"""


# ============================================================================
# Argument Checks
# ============================================================================

def check_in_range(
    name: str,
    value: int,
    min_inclusive: int,
    max_exclusive: int
) -> None:
    """Raise OutOfRangeError unless min_inclusive <= value < max_exclusive

    Args:
        name: Human-readable name of the checked value (e.g. "x coordinate")
        value: Actual value
        min_inclusive: Lowest allowed value
        max_exclusive: First value above the allowed range

    Raises:
        OutOfRangeError: When value is outside [min_inclusive, max_exclusive)
    """
    if value < min_inclusive or value >= max_exclusive:
        raise OutOfRangeError(
            f"{name} out of range, {value} not in [{min_inclusive}, {max_exclusive})."
        )


def check_not_none(value: Any, name: str) -> None:
    """Raise InvalidArgumentError when value is None"""
    if value is None:
        raise InvalidArgumentError(f"{name} cannot be None.")

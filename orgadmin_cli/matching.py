"""Abbreviation-tolerant keyword matching."""

from typing import Iterable, Optional

MINIMUM_ABBREVIATION = 3


def close_enough(reference: str, attempt: str, minimum: int = MINIMUM_ABBREVIATION) -> bool:
    """Check whether ``attempt`` names ``reference``.

    An exact match always counts. Otherwise ``attempt`` must be a shorter,
    case-sensitive prefix of ``reference`` that is at least ``minimum``
    characters long.

    Args:
        reference: The canonical keyword.
        attempt: The token supplied by the operator.
        minimum: Shortest prefix accepted as an abbreviation.

    Returns:
        True if the token resolves to the keyword.
    """
    if attempt == reference:
        return True

    if minimum <= len(attempt) < len(reference):
        return reference.startswith(attempt)

    return False


def first_match(
    attempt: str,
    candidates: Iterable[str],
    minimum: int = MINIMUM_ABBREVIATION
) -> Optional[str]:
    """Return the first candidate ``attempt`` abbreviates, or None."""
    for candidate in candidates:
        if close_enough(candidate, attempt, minimum):
            return candidate
    return None

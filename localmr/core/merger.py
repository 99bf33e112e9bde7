from typing import Any, Callable, Iterable, List, Optional

from localmr.errors import FinalizeError
from localmr.models.context import EmissionContext, Pair
from localmr.utils.logger import get_logger

Finalizer = Callable[[List[Pair]], Iterable[Any]]


class Merger:
    """
    Merge/finalize stage after the reduce phase.

    Concatenates the reduce task contexts in task creation order, which makes
    the final sequence independent of the order in which reduce tasks finished.
    An optional finalize hook may then deduplicate, reformat or reorder the
    pairs. Without a hook the concatenation order is the output order; the
    engine itself never drops duplicates.
    """

    def __init__(self):
        self.logger = get_logger(__name__)

    def merge(self, contexts: Iterable[EmissionContext], finalizer: Optional[Finalizer] = None) -> List[Pair]:
        """
        Build the final pair sequence.

        Raises:
            FinalizeError: If the finalize hook raises or returns something
                other than (key, value) pairs.
        """
        pairs: List[Pair] = []
        for context in contexts:
            pairs.extend(context)

        if finalizer is None:
            self.logger.info(f"Merged {len(pairs)} pairs")
            return pairs

        try:
            finalized = [Pair(*pair) for pair in finalizer(list(pairs))]
        except Exception as e:
            raise FinalizeError(f"Finalize hook failed: {type(e).__name__}: {e}") from e

        self.logger.info(f"Merged {len(pairs)} pairs, {len(finalized)} after finalize hook")
        return finalized


def dedupe_pairs(pairs: List[Pair]) -> List[Pair]:
    """Finalize hook dropping repeated (key, value) pairs, keeping the first occurrence."""
    seen = set()
    unique = []
    for pair in pairs:
        try:
            marker = (pair[0], pair[1])
            if marker in seen:
                continue
            seen.add(marker)
        except TypeError:
            # Unhashable value: fall back to a linear check
            if pair in unique:
                continue
        unique.append(pair)
    return unique


def sort_by_key(pairs: List[Pair]) -> List[Pair]:
    """Finalize hook ordering pairs by key; pairs with equal keys keep their order."""
    return sorted(pairs, key=lambda pair: pair[0])

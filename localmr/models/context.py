from typing import Any, Iterator, List, NamedTuple, Optional, Tuple

from localmr.errors import ContextClosedError


class Pair(NamedTuple):
    """A (key, value) pair emitted by user logic."""
    key: Any
    value: Any


class KeyGroup(NamedTuple):
    """A key together with every value emitted for it, in shuffle order."""
    key: Any
    values: Tuple[Any, ...]


class EmissionContext:
    """
    Ordered, append-only sink that user map/reduce logic writes pairs into.

    One context belongs to exactly one task. The owning task is the only
    writer while it runs, so no locking is needed; once the task finishes the
    context is closed and becomes a read-only input to the next phase.
    """

    def __init__(self, owner: Optional[str] = None):
        self.owner = owner
        self._pairs: List[Pair] = []
        self._closed = False

    def write(self, key: Any, value: Any) -> None:
        """
        Append one pair. Passed to user logic as its ``emit`` function.

        Raises:
            ContextClosedError: If the owning task has finished.
            TypeError: If the key is unhashable and so cannot be grouped.
        """
        if self._closed:
            raise ContextClosedError(
                f"Emission context of {self.owner or 'task'} is closed"
            )
        try:
            hash(key)
        except TypeError as e:
            raise TypeError(f"Emitted key {key!r} cannot be used as a grouping key: {e}") from e
        self._pairs.append(Pair(key, value))

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pairs(self) -> Tuple[Pair, ...]:
        return tuple(self._pairs)

    def __iter__(self) -> Iterator[Pair]:
        return iter(tuple(self._pairs))

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"EmissionContext(owner={self.owner!r}, pairs={len(self._pairs)}, {state})"

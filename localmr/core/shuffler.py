from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from localmr.models.context import EmissionContext, KeyGroup
from localmr.utils.logger import get_logger


@dataclass
class ShuffleStats:
    input_pairs: int = 0
    key_groups: int = 0
    grouped_values: int = 0
    combiner_failures: int = 0

    @property
    def combined_away(self) -> int:
        return self.input_pairs - self.grouped_values


class Shuffler:
    """
    Shuffle/combine stage between the map and reduce phases.

    Groups every pair emitted during the map phase by key. Contexts are
    scanned in map task creation order and pairs in emission order, so the
    values of a key group are ordered by chunk, then by record, whatever
    order the map tasks actually ran in. Keys are compared by equality;
    key groups are returned in first-encounter order of their keys.

    With a combiner, the values each map task emitted for one key are first
    passed to ``combiner(key, values)`` and the returned values replace them.
    This only shrinks the volume handed to reducers: for an associative and
    commutative aggregation the reduce output is the same either way.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self.stats = ShuffleStats()

    def group(
        self,
        contexts: Iterable[EmissionContext],
        combiner: Optional[Callable[[Any, List[Any]], Iterable[Any]]] = None,
    ) -> List[KeyGroup]:
        """
        Build one key group per distinct key.

        Args:
            contexts: Map task emission contexts in task creation order.
            combiner: Optional per-task, per-key pre-aggregation.

        Returns:
            List[KeyGroup]: Key groups in first-encounter order of their keys.
        """
        stats = ShuffleStats()
        grouped: Dict[Any, List[Any]] = {}

        for context in contexts:
            stats.input_pairs += len(context)
            if combiner is None:
                for key, value in context:
                    grouped.setdefault(key, []).append(value)
                continue

            local: Dict[Any, List[Any]] = {}
            for key, value in context:
                local.setdefault(key, []).append(value)
            for key, values in local.items():
                combined = self._combine(combiner, key, values, context.owner, stats)
                grouped.setdefault(key, []).extend(combined)

        key_groups = [KeyGroup(key, tuple(values)) for key, values in grouped.items()]
        stats.key_groups = len(key_groups)
        stats.grouped_values = sum(len(group.values) for group in key_groups)
        self.stats = stats

        if combiner is not None:
            self.logger.info(
                f"Shuffled {stats.input_pairs} pairs into {stats.key_groups} key groups "
                f"({stats.combined_away} values combined away)"
            )
        else:
            self.logger.info(f"Shuffled {stats.input_pairs} pairs into {stats.key_groups} key groups")
        return key_groups

    def _combine(self, combiner, key, values: List[Any], owner: Optional[str], stats: ShuffleStats) -> List[Any]:
        try:
            return list(combiner(key, list(values)))
        except Exception as e:
            stats.combiner_failures += 1
            self.logger.warning(
                f"Combiner failed for key {key!r} of {owner or 'map task'}, "
                f"keeping {len(values)} uncombined values: {type(e).__name__}: {e}"
            )
            return values

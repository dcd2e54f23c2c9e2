"""
Result distribution - caps returned slots while keeping every requested day represented
"""
import logging
from collections import OrderedDict
from typing import List

logger = logging.getLogger(__name__)


def _by_score(slots: List) -> List:
    return sorted(slots, key=lambda s: s.score, reverse=True)


def distribute_results(slots: List, max_results: int, multi_day: bool) -> List:
    """
    Select at most max_results slots.

    Single day: top scorers. Multi-day: each day first gets
    max(1, max_results // day_count) of its own top scorers, then remaining
    capacity goes to the best leftover slots from any day. When there are
    more days than max_results only the best day representatives survive.
    The selection is returned ranked by score, best first; chronological
    grouping is left to the formatters.
    """
    if max_results <= 0 or not slots:
        return []

    if not multi_day:
        selected = _by_score(slots)[:max_results]
    else:
        by_day = OrderedDict()
        for slot in sorted(slots, key=lambda s: s.start_time):
            by_day.setdefault(slot.start_time.date(), []).append(slot)

        per_day = max(1, max_results // len(by_day))
        selected = []
        for day, day_slots in by_day.items():
            selected.extend(_by_score(day_slots)[:per_day])

        # More days than capacity: keep the strongest day representatives
        if len(selected) > max_results:
            selected = _by_score(selected)[:max_results]
        elif len(selected) < max_results:
            chosen = set(id(s) for s in selected)
            leftovers = [s for s in slots if id(s) not in chosen]
            selected.extend(_by_score(leftovers)[:max_results - len(selected)])

        logger.info(f"📊 Distributed {len(selected)} slots across {len(by_day)} days "
                    f"({per_day} per day before fill)")

    return _by_score(selected)

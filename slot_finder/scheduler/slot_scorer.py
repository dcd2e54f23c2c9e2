"""
Slot scoring and per-day recommendation
"""
import logging
import random
from collections import OrderedDict
from typing import List, Optional

logger = logging.getLogger(__name__)

AVAILABILITY_WEIGHT = 0.9
MORNING_BONUS = 0.05  # start hour 9-11
EARLY_AFTERNOON_BONUS = 0.03  # start hour 14-15
MAX_JITTER = 0.05

RECOMMENDATION_BOOST = 5.0
RECOMMENDATION_BOOST_THRESHOLD = 95.0
DISPLAY_SCORE_CEILING = 100.0


def time_of_day_bonus(hour: int) -> float:
    if 9 <= hour <= 11:
        return MORNING_BONUS
    if 14 <= hour <= 15:
        return EARLY_AFTERNOON_BONUS
    return 0.0


class SlotScorer:
    """
    Composite slot score: availability ratio * 0.9 + time-of-day bonus + jitter.

    The jitter source is injected so a request can be replayed with the same
    seed; independent requests get independent generators.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def availability_term(self, available_count: int, total_participants: int) -> float:
        # Nobody to check: the ratio term is skipped, bonuses still apply
        if total_participants <= 0:
            return 0.0
        return (available_count / total_participants) * AVAILABILITY_WEIGHT

    def score(self, slot) -> float:
        jitter = self.rng.uniform(0.0, MAX_JITTER)
        return (self.availability_term(slot.available_count, slot.total_participants)
                + time_of_day_bonus(slot.start_time.hour)
                + jitter)

    @staticmethod
    def mark_recommended(slots: List) -> List:
        """
        Flag the top-scored slot of every calendar day.

        The flagged slot gets a cosmetic display boost of +5 (capped at 100)
        unless its display score is already 95 or more. Ranking scores are
        left untouched.
        """
        by_day = OrderedDict()
        for slot in slots:
            slot.is_recommended = False
            slot.recommendation_boost = 0.0
            by_day.setdefault(slot.start_time.date(), []).append(slot)

        recommended = []
        for day, day_slots in by_day.items():
            best = max(day_slots, key=lambda s: s.score)
            best.is_recommended = True

            base = best.base_display_score
            if base < RECOMMENDATION_BOOST_THRESHOLD:
                best.recommendation_boost = min(DISPLAY_SCORE_CEILING, base + RECOMMENDATION_BOOST) - base

            logger.debug(f"⭐ Recommended {best.start_time:%Y-%m-%d %H:%M} (score {best.score:.3f})")
            recommended.append(best)

        return recommended

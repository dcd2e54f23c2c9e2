"""
Day selector resolution - narrows an enumerated business-day range
"""
import logging
from datetime import date
from typing import Dict, List, Any, Optional, Iterable

logger = logging.getLogger(__name__)

FULL_RANGE = "fullRange"
FIRST_N = "firstN"
SPECIFIC_DAYS = "specificDays"
VALID_MODES = (FULL_RANGE, FIRST_N, SPECIFIC_DAYS)

WEEKDAY_CODES = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


class NoMatchingBusinessDaysError(ValueError):
    """A specificDays selector matched none of the business days in range"""

    def __init__(self, days_of_week: List[str]):
        self.days_of_week = days_of_week
        super().__init__(f"No business days match {days_of_week}")


class DaySelector:
    """Narrowing rule: full range, first N business days, or specific weekdays"""

    def __init__(self, mode: str = FULL_RANGE, n: Optional[int] = None,
                 days_of_week: Optional[List[str]] = None):
        self.mode = mode
        self.n = n
        self.days_of_week = list(days_of_week or [])

    @classmethod
    def from_dict(cls, data: Any) -> "DaySelector":
        """Build from the model's daysSelector object, tolerating junk values"""
        if not isinstance(data, dict):
            return cls()

        mode = data.get("mode")
        if mode not in VALID_MODES:
            mode = FULL_RANGE

        n = data.get("n")
        if isinstance(n, bool):
            n = None
        elif isinstance(n, float) and n.is_integer():
            n = int(n)
        elif isinstance(n, str) and n.strip().isdigit():
            n = int(n.strip())
        elif not isinstance(n, int):
            n = None

        days = data.get("daysOfWeek")
        if isinstance(days, str):
            days = [days]
        if not isinstance(days, list):
            days = []
        days = [d.strip() for d in days if isinstance(d, str) and d.strip()]

        return cls(mode=mode, n=n, days_of_week=days)

    @property
    def effective_mode(self) -> str:
        """Mode actually applied; invalid companion fields mean no narrowing"""
        if self.mode == FIRST_N and self.n is not None and self.n > 0:
            return FIRST_N
        if self.mode == SPECIFIC_DAYS and self.wanted_codes():
            return SPECIFIC_DAYS
        return FULL_RANGE

    def wanted_codes(self) -> set:
        """Three-letter lower-case weekday codes requested ("Tuesday" -> "tue")"""
        codes = set()
        for day in self.days_of_week:
            code = day.strip().lower()[:3]
            if code in WEEKDAY_CODES:
                codes.add(code)
        return codes

    def to_dict(self) -> Dict[str, Any]:
        return {"mode": self.mode, "n": self.n, "daysOfWeek": list(self.days_of_week)}

    def __repr__(self) -> str:
        return f"DaySelector(mode={self.mode!r}, n={self.n!r}, days_of_week={self.days_of_week!r})"


class DayResolution:
    """Surviving business days plus the effective start/end they imply"""

    def __init__(self, days: List[date]):
        self.days = days

    @property
    def effective_start(self) -> Optional[date]:
        return self.days[0] if self.days else None

    @property
    def effective_end(self) -> Optional[date]:
        return self.days[-1] if self.days else None

    @property
    def is_multi_day(self) -> bool:
        return len(self.days) > 1


def weekday_code(day: date) -> str:
    return WEEKDAY_CODES[day.weekday()]


def resolve_business_days(business_days: Iterable[date],
                          selector: Optional[DaySelector]) -> DayResolution:
    """
    Narrow an ordered business-day sequence according to the selector.

    Chronological order is preserved. A specificDays selector that keeps
    nothing raises NoMatchingBusinessDaysError instead of widening the range.
    """
    days = list(business_days)
    selector = selector or DaySelector()
    mode = selector.effective_mode

    if mode == FIRST_N:
        narrowed = days[:selector.n]
        logger.info(f"📅 firstN selector: keeping first {selector.n} of {len(days)} business days")
        return DayResolution(narrowed)

    if mode == SPECIFIC_DAYS:
        wanted = selector.wanted_codes()
        narrowed = [d for d in days if weekday_code(d) in wanted]
        logger.info(f"📅 specificDays selector {sorted(wanted)}: {len(narrowed)} of {len(days)} days match")
        if not narrowed:
            raise NoMatchingBusinessDaysError(selector.days_of_week)
        return DayResolution(narrowed)

    if selector.mode != FULL_RANGE:
        logger.warning(f"⚠️  Selector {selector!r} has invalid companion fields, using full range")

    return DayResolution(days)

"""
Candidate slot grid generation for the Slot Finder
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Any, Iterable, Optional, Tuple

from config.settings import SchedulingSettings
from slot_finder.calendar.availability_simulator import AvailabilitySimulator
from slot_finder.calendar.business_calendar import next_business_day_on_or_after
from slot_finder.scheduler.slot_scorer import SlotScorer, DISPLAY_SCORE_CEILING

logger = logging.getLogger(__name__)

MORNING = "morning"
AFTERNOON = "afternoon"
ALL_DAY = "all"

FALLBACK_SLOTS = ((10, 0.95), (14, 0.85))  # (start hour, score)


class CandidateSlot:
    """A candidate meeting window with simulated availability"""

    def __init__(self, start_time: datetime, end_time: datetime,
                 available_participants: List[str], total_participants: int,
                 score: float = 0.0):
        self.start_time = start_time
        self.end_time = end_time
        self.available_participants = list(available_participants)
        self.total_participants = total_participants
        self.score = score
        self.is_recommended = False
        self.recommendation_boost = 0.0

    @property
    def available_count(self) -> int:
        return len(self.available_participants)

    @property
    def day(self) -> date:
        return self.start_time.date()

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)

    @property
    def is_fully_available(self) -> bool:
        return self.available_count >= self.total_participants

    @property
    def base_display_score(self) -> float:
        return min(DISPLAY_SCORE_CEILING, self.score * 100.0)

    @property
    def display_score(self) -> float:
        """0-100 score shown to users, including the recommendation boost"""
        return min(DISPLAY_SCORE_CEILING, self.base_display_score + self.recommendation_boost)

    @property
    def availability_label(self) -> str:
        return f"{self.available_count}/{self.total_participants}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "availableParticipants": list(self.available_participants),
            "totalParticipants": self.total_participants,
            "score": round(self.score, 4),
            "displayScore": round(self.display_score, 1),
            "isRecommended": self.is_recommended,
        }

    def __repr__(self) -> str:
        return (f"CandidateSlot({self.start_time:%Y-%m-%d %H:%M}-{self.end_time:%H:%M}, "
                f"{self.availability_label}, score={self.score:.3f})")


class SlotGridGenerator:
    """Builds fixed-stride candidate slots inside working hours, day by day"""

    def __init__(self, settings: SchedulingSettings,
                 simulator: AvailabilitySimulator = None,
                 scorer: SlotScorer = None):
        self.settings = settings
        self.simulator = simulator or AvailabilitySimulator()
        self.scorer = scorer or SlotScorer()

    def working_window(self, day: date, range_start: Optional[datetime] = None,
                       range_end: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        """
        Workday bounds for one day, narrowed by the request's own start time on
        its first day and end time on its last day. Never wider than the workday.
        """
        window_start = datetime.combine(day, self.settings.workday_start)
        window_end = datetime.combine(day, self.settings.workday_end)

        if range_start is not None and range_start.date() == day and range_start.time() > time(0, 0):
            window_start = max(window_start, datetime.combine(day, range_start.time()))

        if range_end is not None and range_end.date() == day and range_end.time() > time(0, 0):
            window_end = min(window_end, datetime.combine(day, range_end.time()))

        return window_start, window_end

    def generate_for_day(self, day: date, duration_minutes: int, participant_emails: List[str],
                         range_start: Optional[datetime] = None,
                         range_end: Optional[datetime] = None) -> List[CandidateSlot]:
        """All candidate slots for one day; too short a window yields none"""
        window_start, window_end = self.working_window(day, range_start, range_end)
        duration = timedelta(minutes=duration_minutes)
        step = timedelta(minutes=self.settings.slot_interval_minutes)

        slots = []
        slot_start = window_start
        while slot_start + duration <= window_end:
            available, _ = self.simulator.check(slot_start, participant_emails)
            slot = CandidateSlot(
                start_time=slot_start,
                end_time=slot_start + duration,
                available_participants=available,
                total_participants=len(participant_emails),
            )
            slot.score = self.scorer.score(slot)
            slots.append(slot)
            slot_start += step

        logger.info(f"🗓️  {day:%Y-%m-%d}: {len(slots)} slots between "
                    f"{window_start:%H:%M} and {window_end:%H:%M}")
        return slots

    def workday_midpoint(self) -> time:
        start = datetime.combine(date.min, self.settings.workday_start)
        end = datetime.combine(date.min, self.settings.workday_end)
        return (start + (end - start) / 2).time()

    def filter_time_of_day(self, slots: List[CandidateSlot], time_of_day: str) -> List[CandidateSlot]:
        """Hard morning/afternoon split at the workday midpoint"""
        if time_of_day not in (MORNING, AFTERNOON):
            return slots

        midpoint = self.workday_midpoint()
        if time_of_day == MORNING:
            return [s for s in slots if s.start_time.time() < midpoint]
        return [s for s in slots if s.start_time.time() >= midpoint]

    def generate(self, days: Iterable[date], duration_minutes: int, participant_emails: List[str],
                 time_of_day: str = ALL_DAY, range_start: Optional[datetime] = None,
                 range_end: Optional[datetime] = None) -> List[CandidateSlot]:
        all_slots = []
        for day in days:
            all_slots.extend(self.generate_for_day(day, duration_minutes, participant_emails,
                                                   range_start, range_end))

        filtered = self.filter_time_of_day(all_slots, time_of_day)
        if len(filtered) != len(all_slots):
            logger.info(f"🕒 Time-of-day '{time_of_day}' kept {len(filtered)} of {len(all_slots)} slots")
        return filtered

    def fallback_slots(self, requested_start: datetime, duration_minutes: int,
                       participant_emails: List[str]) -> List[CandidateSlot]:
        """10:00 and 14:00 on the first business day on/after the requested start"""
        day = next_business_day_on_or_after(requested_start)
        duration = timedelta(minutes=duration_minutes)

        slots = []
        for hour, score in FALLBACK_SLOTS:
            start = datetime.combine(day, time(hour, 0))
            slots.append(CandidateSlot(
                start_time=start,
                end_time=start + duration,
                available_participants=participant_emails,
                total_participants=len(participant_emails),
                score=score,
            ))

        logger.warning(f"⚠️  No slots generated, using fallback slots on {day:%Y-%m-%d}")
        return slots

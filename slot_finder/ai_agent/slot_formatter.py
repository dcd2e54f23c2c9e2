"""
Slot presentation - turns ranked slots into the text shown to the user
"""
import logging
import threading
from collections import OrderedDict
from datetime import datetime
from typing import Dict, List, Any, Optional

from config.settings import Config
from slot_finder.ai_agent.llm_client import ChatTransport, FormattingRequest, LLMTransportError
from slot_finder.calendar.business_calendar import format_time_range, relative_date_description

logger = logging.getLogger(__name__)

NO_SLOTS_MESSAGE = "I couldn't find any available slots that match your criteria."


class SlotFormatter:
    """Formats slots through the model, falling back to a deterministic layout"""

    def __init__(self, transport: Optional[ChatTransport] = None,
                 model_config: Dict[str, Any] = None, timeout_seconds: float = None):
        self.transport = transport
        self.model_config = model_config or Config.get_model_config()
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else Config.LLM_TIMEOUT

    @staticmethod
    def to_pipe_lines(slots: List) -> List[str]:
        """start|end|score|avail/total|emails per slot, in chronological order"""
        return [
            f"{slot.start_time:%Y-%m-%dT%H:%M}|{slot.end_time:%Y-%m-%dT%H:%M}|"
            f"{slot.display_score:.0f}|{slot.availability_label}|{','.join(slot.available_participants)}"
            for slot in sorted(slots, key=lambda s: s.start_time)
        ]

    def format_slots(self, slots: List, request_text: str, now: datetime,
                     cancel_event: Optional[threading.Event] = None) -> str:
        if not slots:
            return NO_SLOTS_MESSAGE

        if self.transport is None:
            return self.format_fallback(slots, now)

        in_order = sorted(slots, key=lambda s: s.start_time)
        request = FormattingRequest(
            slot_lines=self.to_pipe_lines(in_order),
            original_request=request_text,
            current_time=now,
            recommended_starts=[f"{s.start_time:%Y-%m-%dT%H:%M}" for s in in_order if s.is_recommended],
        )

        try:
            text = self.transport.complete(request.to_payload(self.model_config),
                                           self.timeout_seconds, cancel_event)
        except LLMTransportError as e:
            logger.warning(f"⚠️  Formatting call failed ({e}), using built-in layout")
            return self.format_fallback(slots, now)

        if not text or not text.strip():
            logger.warning("⚠️  Formatting call returned empty text, using built-in layout")
            return self.format_fallback(slots, now)

        return text.strip()

    @staticmethod
    def format_fallback(slots: List, now: datetime) -> str:
        """Grouped-by-day text with a star on each day's recommended slot"""
        if not slots:
            return NO_SLOTS_MESSAGE

        plural = "s" if len(slots) > 1 else ""
        lines = [f"✨ I found {len(slots)} available time slot{plural} for you:", ""]

        by_day = OrderedDict()
        for slot in sorted(slots, key=lambda s: s.start_time):
            by_day.setdefault(slot.start_time.date(), []).append(slot)

        for day, day_slots in by_day.items():
            lines.append(f"**{day:%A, %B} {day.day}** ({relative_date_description(day, now)}):")
            for slot in day_slots:
                line = f"• {format_time_range(slot.start_time, slot.end_time)}"
                if slot.total_participants:
                    line += f" ({slot.availability_label} participants available)"
                if slot.is_recommended:
                    line += " ⭐ Recommended"
                lines.append(line)
            lines.append("")

        lines.append("Would you like me to check other time options?")
        return "\n".join(lines)

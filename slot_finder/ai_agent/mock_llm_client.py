"""
Mock LLM transport for running without an external model endpoint
"""
import json
import logging
import re
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Dict, Any, Optional, Tuple

from slot_finder.ai_agent.llm_client import ChatTransport
from slot_finder.calendar.business_calendar import next_business_day_on_or_after

logger = logging.getLogger(__name__)

WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']
NUMBER_WORDS = {'one': 1, 'two': 2, 'three': 3, 'four': 4, 'five': 5}
EMAIL_PATTERN = r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'


class MockLLMTransport(ChatTransport):
    """Deterministic stand-in that answers with regex-derived JSON or plain text"""

    name = "mock"

    def _send(self, payload: Dict[str, Any], timeout: float) -> str:
        messages = payload.get("messages", [])
        system = next((m["content"] for m in messages if m.get("role") == "system"), "")
        user = next((m["content"] for m in messages if m.get("role") == "user"), "")

        if payload.get("response_format", {}).get("type") == "json_object":
            return json.dumps(self.extract(user, self._current_time(system)))
        return self.format_lines(user)

    @staticmethod
    def _current_time(system_prompt: str) -> datetime:
        match = re.search(r'CURRENT TIME:\s*(\S+)', system_prompt)
        if match:
            try:
                return datetime.fromisoformat(match.group(1))
            except ValueError:
                pass
        return datetime.now()

    def extract(self, user_content: str, now: datetime) -> Dict[str, Any]:
        """Mock parameter extraction using simple regex patterns"""
        message = user_content.split("\n\nCORRECTION:")[0]
        content_lower = message.lower()
        logger.info(f"🤖 MOCK: Extracting parameters from: {message[:80]}")

        participants = []
        for email in re.findall(EMAIL_PATTERN, message):
            if email.lower() not in participants:
                participants.append(email.lower())

        duration = self._duration(content_lower)
        date_range = self._date_range(content_lower, now)

        if date_range is None and not participants and duration is None:
            return {"needClarification": {"question": "Which days should I search, and who should attend?"}}

        start, end = date_range or self._default_range(now)

        time_of_day = "all"
        if "morning" in content_lower:
            time_of_day = "morning"
        elif "afternoon" in content_lower:
            time_of_day = "afternoon"

        result = {
            "startDate": start.strftime('%Y-%m-%dT00:00:00'),
            "endDate": end.strftime('%Y-%m-%dT00:00:00'),
            "timeOfDay": time_of_day,
            "durationMinutes": duration,
            "participantEmails": participants,
            "daysSelector": self._days_selector(content_lower),
            "needClarification": False,
        }
        logger.info(f"🤖 MOCK: Extracted -> {result}")
        return result

    @staticmethod
    def _duration(content_lower: str) -> Optional[int]:
        duration_patterns = [
            (r'(\d+)\s*-?\s*(?:minutes?|mins?)\b', lambda x: int(x)),
            (r'(\d+)\s*-?\s*hours?\b', lambda x: int(x) * 60),
            (r'half\s*(?:an?\s*)?hour', lambda x: 30),
            (r'\ban?\s+hour\b', lambda x: 60),
        ]
        for pattern, converter in duration_patterns:
            match = re.search(pattern, content_lower)
            if match:
                return converter(match.group(1) if match.groups() else None)
        return None

    @staticmethod
    def _next_monday(now: datetime) -> datetime:
        return now + timedelta(days=7 - now.weekday())

    def _default_range(self, now: datetime) -> Tuple[datetime, datetime]:
        start = datetime.combine(next_business_day_on_or_after(now + timedelta(days=1)), datetime.min.time())
        return start, start + timedelta(days=6)

    def _date_range(self, content_lower: str, now: datetime) -> Optional[Tuple[datetime, datetime]]:
        if 'next week' in content_lower:
            monday = self._next_monday(now)
            return monday, monday + timedelta(days=4)

        if 'this week' in content_lower:
            if now.weekday() >= 5:
                monday = self._next_monday(now)
                return monday, monday + timedelta(days=4)
            friday = now + timedelta(days=4 - now.weekday())
            return now, friday

        if 'tomorrow' in content_lower:
            day = next_business_day_on_or_after(now + timedelta(days=1))
            start = datetime.combine(day, datetime.min.time())
            return start, start

        if 'today' in content_lower:
            return now, now

        for index, day_name in enumerate(WEEKDAYS[:5]):
            if day_name in content_lower:
                days_ahead = (index - now.weekday()) % 7 or 7
                target = now + timedelta(days=days_ahead)
                return target, target

        return None

    @staticmethod
    def _days_selector(content_lower: str) -> Dict[str, Any]:
        first_n = re.search(r'first\s+(\d+|one|two|three|four|five)\s+(?:business\s+|working\s+)?days?',
                            content_lower)
        if first_n:
            value = first_n.group(1)
            n = int(value) if value.isdigit() else NUMBER_WORDS[value]
            return {"mode": "firstN", "n": n, "daysOfWeek": []}

        if 'next week' in content_lower or 'this week' in content_lower:
            named = [day[:3].title() for day in WEEKDAYS if day in content_lower]
            if named:
                return {"mode": "specificDays", "n": None, "daysOfWeek": named}

        return {"mode": "fullRange", "n": None, "daysOfWeek": []}

    def format_lines(self, user_content: str) -> str:
        """Mock slot formatting: group pipe-delimited lines by day"""
        recommended = set()
        rec_match = re.search(r'Recommended slot starts:\s*(.+)', user_content)
        if rec_match:
            recommended = {s.strip() for s in rec_match.group(1).split(',')}

        by_day = OrderedDict()
        for line in user_content.splitlines():
            parts = line.split('|')
            if len(parts) < 4:
                continue
            try:
                start = datetime.fromisoformat(parts[0])
                end = datetime.fromisoformat(parts[1])
            except ValueError:
                continue
            by_day.setdefault(start.date(), []).append((start, end, parts[3], parts[0] in recommended))

        if not by_day:
            return "I couldn't find any available slots that match your criteria."

        lines = ["Here are the best meeting times I found:", ""]
        for day, entries in sorted(by_day.items()):
            lines.append(f"{day:%A, %B} {day.day}:")
            for start, end, availability, is_recommended in sorted(entries):
                marker = " ⭐ Recommended" if is_recommended else ""
                lines.append(f"• {start:%H:%M} - {end:%H:%M} ({availability} available){marker}")
            lines.append("")
        return "\n".join(lines).strip()

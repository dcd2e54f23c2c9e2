"""
Configuration settings for the Slot Finder scheduling assistant
"""
import os
from datetime import time
from typing import Dict, List, Any, NamedTuple


class SchedulingSettings(NamedTuple):
    """Immutable per-run scheduling inputs handed to the core"""
    workday_start: time
    workday_end: time
    slot_interval_minutes: int
    default_duration_minutes: int
    max_results: int


class Config:
    # LLM endpoint (OpenAI-compatible chat completions)
    LLM_BASE_URL = os.getenv("SLOT_FINDER_LLM_BASE_URL", "http://localhost:4000/v1")
    LLM_API_KEY = os.getenv("SLOT_FINDER_LLM_API_KEY", "NULL")  # vLLM / Open WebUI accept any key
    DEFAULT_MODEL = os.getenv("SLOT_FINDER_LLM_MODEL", "mistral:7b")
    LLM_TRANSPORT = os.getenv("SLOT_FINDER_LLM_TRANSPORT", "http")  # http | openai | mock
    LLM_TIMEOUT = 30  # seconds, applies to every model call

    # Low temperature keeps the extraction JSON stable
    MAX_TOKENS = 500
    TEMPERATURE = 0.1
    FORMATTING_MAX_TOKENS = 800
    FORMATTING_TEMPERATURE = 0.4

    # Scheduling Configuration
    WORKDAY_START = "09:00"
    WORKDAY_END = "17:00"
    SLOT_INTERVAL_MINUTES = 30
    DEFAULT_MEETING_DURATION = 60  # minutes
    MAX_SLOTS_TO_SHOW = 10
    MIN_MEETING_DURATION = 15
    MAX_MEETING_DURATION = 480  # 8 hours

    # API Configuration
    API_HOST = "0.0.0.0"
    API_PORT = 5000

    # User-facing messages
    GENERIC_ERROR_MESSAGE = (
        "I encountered an internal issue while processing your scheduling request. Please try again."
    )
    MISSING_PARTICIPANTS_MESSAGE = "Please share the participant email addresses to check availability."
    WEEKEND_CLARIFICATION_MESSAGE = "Could you clarify a business-day range (Mon-Fri only)?"
    SPAN_CLARIFICATION_MESSAGE = "Could you confirm the exact business-day span you want?"
    NO_MATCHING_DAYS_MESSAGE = (
        "I couldn't match the specified days to business days. "
        "Please rephrase or specify valid weekdays (Mon-Fri)."
    )
    DEFAULT_CLARIFICATION_QUESTION = (
        "Could you clarify your request? Please include the date range (e.g. 'next week'), "
        "the meeting length and the participant email addresses."
    )
    UNREACHABLE_CLARIFICATION_QUESTION = (
        "I couldn't interpret your request right now. Could you restate the dates, "
        "duration and participant emails you have in mind?"
    )
    INVALID_RANGE_CLARIFICATION_QUESTION = (
        "The date range looks inverted or incomplete. Which start and end dates should I search?"
    )

    # Corrective notes appended to the extraction prompt
    STRICT_JSON_CORRECTION_NOTE = (
        "Your previous answer was not valid JSON. Return exactly ONE JSON object that follows the "
        "schema. No prose, no code fences, no comments, no trailing commas."
    )
    WEEKEND_CORRECTION_NOTE = "Weekends are not allowed by config; adjust to business days only."
    SPAN_CORRECTION_NOTE = (
        "Your output seems to ignore the requested span; please re-interpret and return JSON again."
    )

    EXTRACTION_SYSTEM_PROMPT = """You are a meeting parameter extraction assistant. Extract scheduling parameters from the user's message and return ONLY one JSON object.

CURRENT TIME: {current_time}
CURRENT WEEKDAY: {current_weekday}

BUSINESS-DAY RULES:
1. Business days are Monday to Friday. Never return a Saturday or Sunday as startDate or endDate.
2. "next week" = Monday to Friday of the following calendar week.
3. "this week" = from today (or the next business day) to Friday of the current week.
4. "tomorrow" = the next calendar day, moved forward to Monday if it falls on a weekend.
5. Working hours are {workday_start} to {workday_end}. Use 00:00:00 as time unless the user gives a time.
6. "first N days of <range>" = daysSelector mode "firstN" with n = N.
7. Named weekdays inside a range ("Tuesday and Thursday next week") = mode "specificDays" with daysOfWeek like ["Tue", "Thu"].
8. Otherwise daysSelector mode is "fullRange".
9. Only include email addresses that literally appear in the message. Never invent participants.
10. If the request cannot be interpreted, set needClarification to {{"question": "<one short question>"}}.

REQUIRED JSON FORMAT:
{{"startDate": "YYYY-MM-DDTHH:MM:SS", "endDate": "YYYY-MM-DDTHH:MM:SS", "timeOfDay": "morning|afternoon|all", "durationMinutes": 60, "participantEmails": ["a@x.com"], "daysSelector": {{"mode": "fullRange|firstN|specificDays", "n": null, "daysOfWeek": []}}, "needClarification": false}}

Return ONLY the JSON object (no explanations):"""

    FORMATTING_SYSTEM_PROMPT = """You are a friendly scheduling assistant. Present the candidate meeting slots below to the user.

FORMAT RULES:
1. Group slots by day, days in chronological order, with a heading per day like "Tuesday, March 4".
2. List each slot as "HH:MM - HH:MM" followed by availability like "(2/3 available)".
3. Mark the recommended slot of each day with a star (⭐) and the word "Recommended".
4. Keep it concise and professional. Do not invent slots or change any time.

Each input line is: start|end|score|available/total|available emails"""

    @classmethod
    def get_model_config(cls, model_name: str = None) -> Dict[str, Any]:
        """Get model configuration for the chat completions endpoint"""
        return {
            "model": model_name or cls.DEFAULT_MODEL,
            "base_url": cls.LLM_BASE_URL,
            "api_key": cls.LLM_API_KEY,
            "max_tokens": cls.MAX_TOKENS,
            "temperature": cls.TEMPERATURE,
            "formatting_max_tokens": cls.FORMATTING_MAX_TOKENS,
            "formatting_temperature": cls.FORMATTING_TEMPERATURE,
        }

    @classmethod
    def get_scheduling_settings(cls) -> SchedulingSettings:
        """Snapshot the scheduling knobs into an immutable settings object"""
        return SchedulingSettings(
            workday_start=parse_clock(cls.WORKDAY_START),
            workday_end=parse_clock(cls.WORKDAY_END),
            slot_interval_minutes=cls.SLOT_INTERVAL_MINUTES,
            default_duration_minutes=cls.DEFAULT_MEETING_DURATION,
            max_results=cls.MAX_SLOTS_TO_SHOW,
        )


def parse_clock(value: str) -> time:
    """Parse an 'HH:MM' string into a time"""
    hours, minutes = value.strip().split(":")[:2]
    return time(int(hours), int(minutes))


def validate_scheduling_settings(settings: SchedulingSettings) -> List[str]:
    """Return a list of problems with the scheduling settings (empty when valid)"""
    problems = []

    if settings.workday_end <= settings.workday_start:
        problems.append(
            f"Workday end {settings.workday_end:%H:%M} must be after start {settings.workday_start:%H:%M}"
        )
    if settings.slot_interval_minutes <= 0:
        problems.append(f"Slot interval must be positive, got {settings.slot_interval_minutes}")
    if settings.default_duration_minutes <= 0:
        problems.append(f"Default duration must be positive, got {settings.default_duration_minutes}")
    if settings.max_results <= 0:
        problems.append(f"Max results must be positive, got {settings.max_results}")

    return problems

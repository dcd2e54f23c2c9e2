"""
Parameter extraction gateway - natural language to structured scheduling parameters

States: PENDING -> SUCCESS | NEEDS_CORRECTION | NEEDS_CLARIFICATION.
A malformed first answer earns exactly one corrective re-ask; anything else
that goes wrong ends in a clarification question for the user.
"""
import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Dict, List, Any, Optional

from config.settings import Config, SchedulingSettings
from slot_finder.ai_agent.json_repair import parse_model_json, MalformedModelOutputError
from slot_finder.ai_agent.llm_client import ChatTransport, ExtractionRequest, LLMTransportError
from slot_finder.scheduler.day_selector import DaySelector
from utils.validators import RequestValidator, DataSanitizer

logger = logging.getLogger(__name__)

TIME_OF_DAY_VALUES = ("morning", "afternoon", "all")
FALSY_TOKENS = ("", "false", "no", "none", "null", "0")


class ExtractionState(Enum):
    PENDING = "pending"
    SUCCESS = "success"
    NEEDS_CORRECTION = "needs_correction"
    NEEDS_CLARIFICATION = "needs_clarification"


class ExtractionValidationError(ValueError):
    """Model output parsed but is semantically unusable (dates missing or inverted)"""


class ClarificationQuestion:
    """Follow-up question for the user; reason says which path produced it"""

    def __init__(self, question: str, reason: str = "model"):
        self.question = question
        self.reason = reason

    def __repr__(self) -> str:
        return f"ClarificationQuestion({self.question!r}, reason={self.reason!r})"


class ExtractionResult:
    """
    Structured scheduling parameters.

    When needs_clarification is set nothing else on the result may be used.
    """

    def __init__(self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None,
                 time_of_day: str = "all", duration_minutes: Optional[int] = None,
                 participant_emails: Optional[List[str]] = None,
                 day_selector: Optional[DaySelector] = None,
                 needs_clarification: Optional[ClarificationQuestion] = None,
                 state: ExtractionState = ExtractionState.SUCCESS, attempts: int = 1):
        self.start_date = start_date
        self.end_date = end_date
        self.time_of_day = time_of_day
        self.duration_minutes = duration_minutes
        self.participant_emails = list(participant_emails or [])
        self.day_selector = day_selector or DaySelector()
        self.needs_clarification = needs_clarification
        self.state = state
        self.attempts = attempts

    @classmethod
    def clarification(cls, question: str, reason: str, attempts: int) -> "ExtractionResult":
        return cls(needs_clarification=ClarificationQuestion(question, reason),
                   state=ExtractionState.NEEDS_CLARIFICATION, attempts=attempts)

    @property
    def is_clarification(self) -> bool:
        return self.needs_clarification is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.is_clarification:
            return {"needClarification": {"question": self.needs_clarification.question}}
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "timeOfDay": self.time_of_day,
            "durationMinutes": self.duration_minutes,
            "participantEmails": list(self.participant_emails),
            "daysSelector": self.day_selector.to_dict(),
        }


def parse_model_datetime(value: Any) -> datetime:
    """ISO-8601 from the model; offsets are dropped and the wall-clock time kept"""
    if not isinstance(value, str) or not value.strip():
        raise ExtractionValidationError(f"Missing or non-string date: {value!r}")
    try:
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError as e:
        raise ExtractionValidationError(f"Unparsable date {value!r}: {e}") from e
    return parsed.replace(tzinfo=None)


class ParameterExtractionGateway:
    """Single entry point to the model for parameter extraction"""

    MAX_JSON_CORRECTIONS = 1

    def __init__(self, transport: ChatTransport, settings: SchedulingSettings,
                 model_config: Dict[str, Any] = None, timeout_seconds: float = None):
        self.transport = transport
        self.settings = settings
        self.model_config = model_config or Config.get_model_config()
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else Config.LLM_TIMEOUT

    def extract_parameters(self, message: str, now: datetime,
                           correction_note: Optional[str] = None,
                           cancel_event: Optional[threading.Event] = None) -> ExtractionResult:
        """
        Ask the model for parameters, with at most one strict-JSON re-ask.

        The re-ask is only available to calls that did not already carry a
        correction note, so an orchestrator-level correction never fans out
        into more model calls.
        """
        corrections_allowed = 0 if correction_note else self.MAX_JSON_CORRECTIONS
        corrections_used = 0
        attempts = 0
        note = correction_note
        state = ExtractionState.PENDING

        while state in (ExtractionState.PENDING, ExtractionState.NEEDS_CORRECTION):
            attempts += 1
            request = ExtractionRequest(message, now, self.settings, note)
            logger.info(f"🧠 Extraction attempt {attempts} (state={state.value}, note={'yes' if note else 'no'})")

            try:
                raw = self.transport.complete(request.to_payload(self.model_config),
                                              self.timeout_seconds, cancel_event)
            except LLMTransportError as e:
                logger.error(f"❌ Extraction transport failure: {e}")
                return ExtractionResult.clarification(Config.UNREACHABLE_CLARIFICATION_QUESTION,
                                                      "transport", attempts)

            try:
                data = parse_model_json(raw)
            except MalformedModelOutputError as e:
                if corrections_used < corrections_allowed:
                    corrections_used += 1
                    state = ExtractionState.NEEDS_CORRECTION
                    note = Config.STRICT_JSON_CORRECTION_NOTE
                    logger.warning(f"⚠️  Malformed model output ({e}), re-asking for strict JSON")
                    continue
                logger.warning(f"❌ Malformed model output after correction budget spent: {e}")
                return ExtractionResult.clarification(Config.DEFAULT_CLARIFICATION_QUESTION,
                                                      "malformed", attempts)

            try:
                result = self._build_result(data, attempts)
            except ExtractionValidationError as e:
                logger.warning(f"❌ Extraction failed validation: {e}")
                return ExtractionResult.clarification(Config.INVALID_RANGE_CLARIFICATION_QUESTION,
                                                      "semantic", attempts)

            state = result.state
            logger.info(f"✅ Extraction finished: {state.value} after {attempts} attempt(s)")
            return result

    def _build_result(self, data: Dict[str, Any], attempts: int) -> ExtractionResult:
        clarification = self._clarification_question(data.get("needClarification"))
        if clarification is not None:
            return ExtractionResult.clarification(clarification or Config.DEFAULT_CLARIFICATION_QUESTION,
                                                  "model", attempts)

        start_date = parse_model_datetime(data.get("startDate"))
        end_date = parse_model_datetime(data.get("endDate"))
        if end_date.date() < start_date.date():
            raise ExtractionValidationError(f"End date {end_date:%Y-%m-%d} is before start {start_date:%Y-%m-%d}")

        selector_data = data.get("daysSelector", data.get("daySelector"))

        return ExtractionResult(
            start_date=start_date,
            end_date=end_date,
            time_of_day=self._time_of_day(data.get("timeOfDay")),
            duration_minutes=self._duration(data.get("durationMinutes")),
            participant_emails=self._participants(data.get("participantEmails")),
            day_selector=DaySelector.from_dict(selector_data),
            state=ExtractionState.SUCCESS,
            attempts=attempts,
        )

    @staticmethod
    def _clarification_question(value: Any) -> Optional[str]:
        """
        Question text when the model asked for clarification, else None.

        An empty string means clarification was requested without a usable
        question. Models sometimes spell the schema's false as a string, so
        tokens like "false" or "none" do not count as a request.
        """
        if value is None or value is False:
            return None
        if value is True:
            return ""
        if isinstance(value, dict):
            question = value.get("question")
            if isinstance(question, str) and question.strip().lower() not in FALSY_TOKENS:
                return question.strip()
            return None
        if isinstance(value, str):
            if value.strip().lower() in FALSY_TOKENS:
                return None
            return value.strip()
        return None

    @staticmethod
    def _time_of_day(value: Any) -> str:
        if isinstance(value, str) and value.strip().lower() in TIME_OF_DAY_VALUES:
            return value.strip().lower()
        return "all"

    @staticmethod
    def _duration(value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        try:
            duration = int(float(value))
        except (TypeError, ValueError):
            return None
        if duration < Config.MIN_MEETING_DURATION or duration > Config.MAX_MEETING_DURATION:
            logger.warning(f"⚠️  Ignoring out-of-range duration {duration} minutes")
            return None
        return duration

    @staticmethod
    def _participants(value: Any) -> List[str]:
        if isinstance(value, str):
            value = value.split(',')
        if not isinstance(value, list):
            return []

        emails = []
        for item in value:
            if not isinstance(item, str):
                continue
            email = DataSanitizer.sanitize_email(item)
            if RequestValidator.validate_email(email) and email not in emails:
                emails.append(email)
            elif email and email not in emails:
                logger.warning(f"⚠️  Dropping invalid participant email: {item!r}")
        return emails

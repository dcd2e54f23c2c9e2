"""
Scheduling orchestrator - main coordinator of the slot finding pipeline
"""
import logging
import random
import threading
import time
from datetime import datetime
from typing import Dict, List, Any, Optional

from config.settings import Config, SchedulingSettings
from slot_finder.ai_agent.llm_client import ChatTransport, create_transport
from slot_finder.ai_agent.parameter_extractor import ParameterExtractionGateway, ExtractionResult
from slot_finder.ai_agent.slot_formatter import SlotFormatter
from slot_finder.calendar.availability_simulator import AvailabilitySimulator
from slot_finder.calendar.business_calendar import enumerate_business_days, is_weekend
from slot_finder.scheduler.day_selector import resolve_business_days, NoMatchingBusinessDaysError
from slot_finder.scheduler.result_distributor import distribute_results
from slot_finder.scheduler.slot_generator import SlotGridGenerator
from slot_finder.scheduler.slot_scorer import SlotScorer
from utils.logger import SlotFinderLogger
from utils.validators import DataSanitizer

logger = logging.getLogger(__name__)


class SchedulingOutcome:
    """What the pipeline produced for one request; message is always user-ready"""

    SLOTS = "slots"
    CLARIFICATION = "clarification"
    ERROR = "error"

    def __init__(self, kind: str, message: str, slots: Optional[List] = None,
                 parameters: Optional[ExtractionResult] = None):
        self.kind = kind
        self.message = message
        self.slots = list(slots or [])
        self.parameters = parameters

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "response": self.message,
            "slots": [slot.to_dict() for slot in self.slots],
        }


class SchedulingOrchestrator:
    """
    Sequences extraction, anomaly correction, day resolution, slot generation,
    ranking and formatting. Every failure path resolves to a response string.
    """

    def __init__(self, settings: SchedulingSettings = None,
                 gateway: ParameterExtractionGateway = None,
                 formatter: SlotFormatter = None,
                 simulator: AvailabilitySimulator = None,
                 transport: ChatTransport = None):
        self.settings = settings or Config.get_scheduling_settings()

        if gateway is None or formatter is None:
            transport = transport or create_transport()
        self.gateway = gateway or ParameterExtractionGateway(transport, self.settings)
        self.formatter = formatter or SlotFormatter(transport)
        self.simulator = simulator or AvailabilitySimulator()

        logger.info("SchedulingOrchestrator initialized")

    def process_scheduling_request(self, message: str, now: datetime = None,
                                   rng: random.Random = None,
                                   cancel_event: threading.Event = None) -> str:
        """Main entry point: free text in, response text out"""
        return self.schedule(message, now=now, rng=rng, cancel_event=cancel_event).message

    def schedule(self, message: str, now: datetime = None, rng: random.Random = None,
                 cancel_event: threading.Event = None) -> SchedulingOutcome:
        start_time = time.time()
        now = now or datetime.now()
        # One generator per request keeps jitter independent across requests
        rng = rng or random.Random()

        try:
            outcome = self._run_pipeline(message, now, rng, cancel_event)
        except Exception:
            logger.exception(f"❌ Scheduling pipeline error for: {str(message)[:80]}")
            outcome = SchedulingOutcome(SchedulingOutcome.ERROR, Config.GENERIC_ERROR_MESSAGE)

        SlotFinderLogger.log_request_response(str(message), outcome.kind, len(outcome.slots),
                                              time.time() - start_time)
        return outcome

    def _clarify(self, question: str, parameters: ExtractionResult = None) -> SchedulingOutcome:
        logger.info(f"❓ Asking user: {question}")
        return SchedulingOutcome(SchedulingOutcome.CLARIFICATION, question, parameters=parameters)

    @staticmethod
    def _has_weekend_anomaly(result: ExtractionResult) -> bool:
        return is_weekend(result.start_date) or is_weekend(result.end_date)

    @staticmethod
    def _has_truncation_anomaly(result: ExtractionResult, text: str) -> bool:
        return result.start_date.date() == result.end_date.date() and "week" in text.lower()

    def _run_pipeline(self, message: str, now: datetime, rng: random.Random,
                      cancel_event: Optional[threading.Event]) -> SchedulingOutcome:
        text = DataSanitizer.sanitize_text(message)
        logger.info(f"🚀 Processing scheduling request: {text[:100]}")

        # Step 1: extract parameters
        result = self.gateway.extract_parameters(text, now, cancel_event=cancel_event)
        if result.is_clarification:
            return self._clarify(result.needs_clarification.question)

        # Step 2: participants are required
        if not result.participant_emails:
            return self._clarify(Config.MISSING_PARTICIPANTS_MESSAGE, result)

        # Step 3: one corrective re-extraction per anomaly type
        if self._has_weekend_anomaly(result):
            logger.info("🗓️  Weekend in extracted range, requesting correction")
            result = self.gateway.extract_parameters(text, now, correction_note=Config.WEEKEND_CORRECTION_NOTE,
                                                     cancel_event=cancel_event)
            if result.is_clarification:
                return self._clarify(Config.WEEKEND_CLARIFICATION_MESSAGE)

        if self._has_truncation_anomaly(result, text):
            logger.info("🗓️  Single-day range but request mentions a week, requesting reinterpretation")
            result = self.gateway.extract_parameters(text, now, correction_note=Config.SPAN_CORRECTION_NOTE,
                                                     cancel_event=cancel_event)
            if result.is_clarification:
                return self._clarify(Config.SPAN_CLARIFICATION_MESSAGE)

        if not result.participant_emails:
            return self._clarify(Config.MISSING_PARTICIPANTS_MESSAGE, result)

        # Step 4: duration
        duration = result.duration_minutes or self.settings.default_duration_minutes

        # Step 5: resolve the day set
        business_days = list(enumerate_business_days(result.start_date, result.end_date))
        try:
            resolution = resolve_business_days(business_days, result.day_selector)
        except NoMatchingBusinessDaysError as e:
            logger.info(f"📅 Day selector matched nothing: {e}")
            return self._clarify(Config.NO_MATCHING_DAYS_MESSAGE, result)

        logger.info(f"   📅 Days: {[d.isoformat() for d in resolution.days]}")
        logger.info(f"   ⏱️  Duration: {duration} minutes")
        logger.info(f"   👥 Participants: {', '.join(result.participant_emails)}")
        logger.info(f"   🕒 Time of day: {result.time_of_day}")

        # Step 6: generate and score
        scorer = SlotScorer(rng)
        generator = SlotGridGenerator(self.settings, self.simulator, scorer)
        slots = generator.generate(resolution.days, duration, result.participant_emails,
                                   result.time_of_day, result.start_date, result.end_date)
        if not slots:
            slots = generator.fallback_slots(result.start_date, duration, result.participant_emails)

        # Step 7: cap, then flag the best slot of each day
        ranked = distribute_results(slots, self.settings.max_results, multi_day=resolution.is_multi_day)
        SlotScorer.mark_recommended(ranked)
        logger.info(f"✅ Returning {len(ranked)} of {len(slots)} candidate slots")

        # Step 8: present
        response = self.formatter.format_slots(ranked, text, now, cancel_event)
        return SchedulingOutcome(SchedulingOutcome.SLOTS, response, ranked, result)

"""
Logging utilities for the Slot Finder scheduling assistant
"""
import logging
import sys
from datetime import datetime
import json


class SlotFinderLogger:
    """Custom logger setup for Slot Finder"""

    @staticmethod
    def setup_logging(log_level: str = "INFO", log_file: str = None):
        """Setup logging configuration"""

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        # Setup root logger
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level.upper()))

        # Clear existing handlers
        root_logger.handlers.clear()

        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        # File handler (if specified)
        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        # Suppress some noisy loggers
        for noisy in ('urllib3', 'openai', 'httpx', 'werkzeug'):
            logging.getLogger(noisy).setLevel(logging.WARNING)

        return root_logger

    @staticmethod
    def log_request_response(request_text: str, outcome_kind: str,
                             slot_count: int, processing_time: float):
        """Log a one-line summary of a processed scheduling request"""
        logger = logging.getLogger(__name__)

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "processing_time_seconds": round(processing_time, 3),
            "request_preview": request_text[:80],
            "outcome": outcome_kind,
            "slots_returned": slot_count,
        }

        logger.info(f"Request processed: {json.dumps(log_entry)}")

"""
Simulated participant availability for the Slot Finder

Stands in for a real free/busy calendar query. Any real calendar integration
must honour the same contract: given a slot start and a participant list,
return the available subset and its size.
"""
import hashlib
import logging
from datetime import datetime
from functools import lru_cache
from typing import List, Tuple

logger = logging.getLogger(__name__)

AVAILABILITY_PERCENT = 80


@lru_cache(maxsize=8192)
def _availability_bucket(email_key: str, minute_stamp: str) -> int:
    digest = hashlib.md5(f"{email_key}{minute_stamp}".encode("utf-8")).hexdigest()
    return int(digest[:8], 16) % 100


def is_available(email: str, slot_start: datetime) -> bool:
    """Deterministic ~80% availability keyed on (email, slot start minute)"""
    minute_stamp = slot_start.strftime('%Y%m%d%H%M')
    return _availability_bucket(email.strip().lower(), minute_stamp) < AVAILABILITY_PERCENT


class AvailabilitySimulator:
    """Hash-based availability lookup used in place of a calendar service"""

    def is_available(self, email: str, slot_start: datetime) -> bool:
        return is_available(email, slot_start)

    def check(self, slot_start: datetime, emails: List[str]) -> Tuple[List[str], int]:
        """Return (available emails, count) for one slot start"""
        available = [email for email in emails if self.is_available(email, slot_start)]
        return available, len(available)

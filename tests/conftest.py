"""
Pytest configuration and shared fixtures
"""
import json
import random
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import Config
from slot_finder.ai_agent.llm_client import ChatTransport

# Wednesday; "next week" is Mon 2025-07-21 .. Fri 2025-07-25
FIXED_NOW = datetime(2025, 7, 16, 10, 0, 0)


class ScriptedTransport(ChatTransport):
    """Replays canned responses in order and records every payload it was sent"""

    name = "scripted"

    def __init__(self, responses):
        super().__init__(max_workers=1)
        self.responses = list(responses)
        self.payloads = []

    @property
    def call_count(self) -> int:
        return len(self.payloads)

    def user_messages(self):
        return [p["messages"][-1]["content"] for p in self.payloads]

    def _send(self, payload, timeout):
        self.payloads.append(payload)
        if not self.responses:
            raise AssertionError("ScriptedTransport ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response


def extraction_json(start="2025-07-21T00:00:00", end="2025-07-25T00:00:00",
                    emails=("a@x.com", "b@x.com"), duration=60, time_of_day="all",
                    selector=None):
    """A well-formed extraction answer"""
    return {
        "startDate": start,
        "endDate": end,
        "timeOfDay": time_of_day,
        "durationMinutes": duration,
        "participantEmails": list(emails),
        "daysSelector": selector or {"mode": "fullRange", "n": None, "daysOfWeek": []},
        "needClarification": False,
    }


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def settings():
    return Config.get_scheduling_settings()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def scripted_transport():
    """Factory fixture: scripted_transport([response, ...])"""
    created = []

    def _make(responses):
        transport = ScriptedTransport(responses)
        created.append(transport)
        return transport

    yield _make

    for transport in created:
        transport.close()

"""
LLM transport layer for the Slot Finder

Request kinds are a closed set of tagged variants (extraction, formatting),
each producing an OpenAI-compatible chat completions payload. Transports
only move payloads and return the assistant message text.
"""
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from datetime import datetime
from typing import Dict, List, Any, Optional

import requests

from config.settings import Config, SchedulingSettings

logger = logging.getLogger(__name__)


class LLMTransportError(Exception):
    """The model endpoint could not be reached or returned an unusable envelope"""


class LLMTimeoutError(LLMTransportError):
    """The model call exceeded its deadline"""


class LLMCancelledError(LLMTransportError):
    """The caller cancelled the model call"""


class ExtractionRequest:
    """Parameter extraction call: rules + current time + schema, then the user text"""

    kind = "extraction"

    def __init__(self, message: str, current_time: datetime, settings: SchedulingSettings,
                 correction_note: Optional[str] = None):
        self.message = message
        self.current_time = current_time
        self.settings = settings
        self.correction_note = correction_note

    def system_prompt(self) -> str:
        return Config.EXTRACTION_SYSTEM_PROMPT.format(
            current_time=self.current_time.strftime('%Y-%m-%dT%H:%M:%S'),
            current_weekday=self.current_time.strftime('%A'),
            workday_start=self.settings.workday_start.strftime('%H:%M'),
            workday_end=self.settings.workday_end.strftime('%H:%M'),
        )

    def user_content(self) -> str:
        if self.correction_note:
            return f"{self.message}\n\nCORRECTION: {self.correction_note}"
        return self.message

    def to_payload(self, model_config: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "model": model_config["model"],
            "messages": [
                {"role": "system", "content": self.system_prompt()},
                {"role": "user", "content": self.user_content()},
            ],
            "temperature": model_config["temperature"],
            "max_tokens": model_config["max_tokens"],
            "response_format": {"type": "json_object"},
        }


class FormattingRequest:
    """Slot presentation call: pipe-delimited slot lines plus formatting rules"""

    kind = "formatting"

    def __init__(self, slot_lines: List[str], original_request: str, current_time: datetime,
                 recommended_starts: List[str]):
        self.slot_lines = slot_lines
        self.original_request = original_request
        self.current_time = current_time
        self.recommended_starts = recommended_starts

    def user_content(self) -> str:
        parts = [
            f"Current time: {self.current_time:%Y-%m-%dT%H:%M:%S}",
            f"User request: {self.original_request}",
            "Slots:",
            *self.slot_lines,
        ]
        if self.recommended_starts:
            parts.append(f"Recommended slot starts: {', '.join(self.recommended_starts)}")
        return "\n".join(parts)

    def to_payload(self, model_config: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "model": model_config["model"],
            "messages": [
                {"role": "system", "content": Config.FORMATTING_SYSTEM_PROMPT},
                {"role": "user", "content": self.user_content()},
            ],
            "temperature": model_config["formatting_temperature"],
            "max_tokens": model_config["formatting_max_tokens"],
        }


class ChatTransport:
    """
    Base transport. The blocking call runs on a worker thread while the caller
    waits against a deadline and its cancellation event.
    """

    name = "base"
    poll_interval = 0.1

    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix=f"llm-{self.name}")

    def _send(self, payload: Dict[str, Any], timeout: float) -> str:
        raise NotImplementedError

    def complete(self, payload: Dict[str, Any], timeout: float,
                 cancel_event: Optional[threading.Event] = None) -> str:
        if cancel_event is not None and cancel_event.is_set():
            raise LLMCancelledError("Model call cancelled before it started")

        future = self._executor.submit(self._send, payload, timeout)
        deadline = time.monotonic() + timeout

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                future.cancel()
                logger.error(f"⏱️  {self.name} model call timed out after {timeout:.1f}s")
                raise LLMTimeoutError(f"Model call exceeded {timeout:.1f}s")

            try:
                return future.result(timeout=min(self.poll_interval, remaining))
            except FuturesTimeoutError:
                if cancel_event is not None and cancel_event.is_set():
                    future.cancel()
                    logger.warning(f"🛑 {self.name} model call cancelled by caller")
                    raise LLMCancelledError("Model call cancelled")

    def close(self):
        self._executor.shutdown(wait=False)


class HttpChatTransport(ChatTransport):
    """POSTs payloads to an OpenAI-compatible /chat/completions endpoint"""

    name = "http"

    def __init__(self, base_url: str, api_key: str = None, max_workers: int = 4):
        super().__init__(max_workers)
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key

    def _send(self, payload: Dict[str, Any], timeout: float) -> str:
        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f"Bearer {self.api_key}"

        start_time = time.time()
        try:
            response = requests.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                timeout=timeout,
                headers=headers,
            )
        except requests.exceptions.Timeout as e:
            raise LLMTimeoutError(f"Chat completions request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise LLMTransportError(f"Chat completions request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Chat completions request failed: {response.status_code} - {response.text[:200]}")
            raise LLMTransportError(f"Chat completions returned HTTP {response.status_code}")

        try:
            content = response.json()['choices'][0]['message']['content']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMTransportError(f"Unexpected chat completions envelope: {e}") from e

        logger.info(f"🤖 Chat completions response in {time.time() - start_time:.2f}s")
        return (content or "").strip()


class OpenAIChatTransport(ChatTransport):
    """Same contract through the openai SDK client"""

    name = "openai"

    def __init__(self, base_url: str, api_key: str = None, max_workers: int = 4):
        super().__init__(max_workers)
        from openai import OpenAI

        self.client = OpenAI(
            api_key=api_key or "NULL",
            base_url=base_url,
            timeout=Config.LLM_TIMEOUT,
            max_retries=0,  # the extraction gateway owns retry policy
        )

    def _send(self, payload: Dict[str, Any], timeout: float) -> str:
        import openai

        start_time = time.time()
        try:
            completion = self.client.chat.completions.create(timeout=timeout, **payload)
        except openai.APITimeoutError as e:
            raise LLMTimeoutError(f"OpenAI request timed out: {e}") from e
        except openai.OpenAIError as e:
            raise LLMTransportError(f"OpenAI request failed: {e}") from e

        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise LLMTransportError(f"Unexpected completion object: {e}") from e

        logger.info(f"🤖 OpenAI completion in {time.time() - start_time:.2f}s")
        return (content or "").strip()


def create_transport(name: str = None, model_config: Dict[str, Any] = None) -> ChatTransport:
    """Pick the transport named in configuration (http, openai or mock)"""
    name = (name or Config.LLM_TRANSPORT).lower()
    model_config = model_config or Config.get_model_config()

    if name == "http":
        return HttpChatTransport(model_config["base_url"], model_config.get("api_key"))
    if name == "openai":
        return OpenAIChatTransport(model_config["base_url"], model_config.get("api_key"))
    if name == "mock":
        from slot_finder.ai_agent.mock_llm_client import MockLLMTransport
        return MockLLMTransport()

    raise ValueError(f"Unknown LLM transport '{name}'. Expected one of: http, openai, mock")

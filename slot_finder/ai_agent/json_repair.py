"""
Recovery of a single JSON object from free-form model output
"""
import json
import logging
import re
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\n?(.*?)```", re.DOTALL)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_BARE_KEY = re.compile(r'([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)')

_QUOTE_TRANSLATION = str.maketrans({
    "“": '"', "”": '"', "„": '"', "″": '"',
    "‘": "'", "’": "'", "‚": "'", "′": "'",
})


class MalformedModelOutputError(ValueError):
    """The model response does not contain a usable JSON object"""


def strip_code_fences(text: str) -> str:
    """Prefer the first fenced block; otherwise drop stray fence markers"""
    match = _FENCED_BLOCK.search(text)
    if match and "{" in match.group(1):
        return match.group(1)
    return text.replace("```json", "").replace("```JSON", "").replace("```", "")


def normalize_quotes(text: str) -> str:
    """Smart quotes to ASCII, markdown bold/inline-code markers removed"""
    text = text.translate(_QUOTE_TRANSLATION)
    text = text.replace("**", "")
    return re.sub(r"`([^`]*)`", r"\1", text)


def extract_first_json_object(text: str) -> Optional[str]:
    """First balanced {...} block, counting brace depth outside string literals"""
    start = text.find('{')
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i, char in enumerate(text[start:], start):
        if in_string:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def remove_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", text)


def quote_bare_keys(text: str) -> str:
    return _BARE_KEY.sub(r'\1"\2"\3', text)


def parse_model_json(response: str) -> Dict[str, Any]:
    """
    Clean up a model response and parse the first JSON object in it.

    Raises MalformedModelOutputError when nothing parseable is found.
    """
    if not response or not response.strip():
        raise MalformedModelOutputError("Empty model response")

    cleaned = normalize_quotes(strip_code_fences(response))
    candidate = extract_first_json_object(cleaned)
    if candidate is None:
        raise MalformedModelOutputError("No JSON object found in model response")

    candidate = remove_trailing_commas(candidate)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        logger.debug("Strict JSON parse failed, retrying with bare keys quoted")
        try:
            data = json.loads(quote_bare_keys(candidate))
        except json.JSONDecodeError as e:
            raise MalformedModelOutputError(f"Invalid JSON in model response: {e}") from e

    if not isinstance(data, dict):
        raise MalformedModelOutputError("Model response JSON is not an object")

    return data

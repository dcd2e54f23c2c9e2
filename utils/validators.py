"""
Validation utilities for the Slot Finder scheduling assistant
"""
import re
from datetime import datetime
from typing import Dict, Any, List


class RequestValidator:
    """Validator for incoming scheduling requests"""

    EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    MAX_MESSAGE_LENGTH = 2000

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format"""
        if not isinstance(email, str):
            return False
        return bool(re.match(RequestValidator.EMAIL_PATTERN, email.strip()))

    @staticmethod
    def validate_iso_datetime(datetime_str: str) -> bool:
        """Validate an ISO-8601 timestamp"""
        try:
            datetime.fromisoformat(datetime_str.replace('Z', '+00:00'))
            return True
        except (ValueError, AttributeError):
            return False

    @staticmethod
    def validate_schedule_request(request_data: Any) -> List[str]:
        """Validate a /schedule request body and return list of errors"""
        if not isinstance(request_data, dict):
            return ["Request body must be a JSON object"]

        errors = []

        message = request_data.get("message")
        if not isinstance(message, str) or not message.strip():
            errors.append("Missing required field: message")
        elif len(message) > RequestValidator.MAX_MESSAGE_LENGTH:
            errors.append(f"Message too long (max {RequestValidator.MAX_MESSAGE_LENGTH} characters)")

        if "now" in request_data and request_data["now"] is not None:
            if not RequestValidator.validate_iso_datetime(str(request_data["now"])):
                errors.append(f"Invalid datetime format in 'now': {request_data['now']}")

        if "seed" in request_data and request_data["seed"] is not None:
            if isinstance(request_data["seed"], bool) or not isinstance(request_data["seed"], int):
                errors.append("'seed' must be an integer")

        return errors


class DataSanitizer:
    """Sanitize and clean input data"""

    @staticmethod
    def sanitize_email(email: str) -> str:
        """Sanitize email address"""
        return email.strip().strip('<>,;').lower()

    @staticmethod
    def sanitize_text(text: str) -> str:
        """Sanitize free-text content"""
        # Drop control characters, keep printable unicode (smart quotes etc.)
        text = ''.join(ch for ch in text if ch.isprintable() or ch.isspace())
        # Remove excessive whitespace
        return re.sub(r'\s+', ' ', text.strip())

    @staticmethod
    def sanitize_request(request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Sanitize a /schedule request body"""
        sanitized = dict(request_data)

        if isinstance(sanitized.get("message"), str):
            sanitized["message"] = DataSanitizer.sanitize_text(sanitized["message"])

        return sanitized

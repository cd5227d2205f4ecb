# donations/client.py
import logging

import requests
from django.conf import settings
from requests import RequestException

COMMON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}
DEFAULT_REJECTION_MESSAGE = "Failed to save food data"

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    pass


class SubmissionRejected(SubmissionError):
    """The save endpoint answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SubmissionFailed(SubmissionError):
    """No usable response: network error, timeout, bad URL, or an error body that is not JSON."""


def _error_message(data) -> str:
    message = data.get("message") if isinstance(data, dict) else None
    if isinstance(message, str) and message.strip():
        return message
    return DEFAULT_REJECTION_MESSAGE


class SaveFoodClient:
    """POST donation drafts to the save endpoint as JSON."""

    def __init__(self, url: str = None, timeout: float = None):
        self.url = url or settings.SAVE_FOOD_URL
        self.timeout = timeout or getattr(settings, "SAVE_FOOD_TIMEOUT", 30)

    def save(self, payload: dict) -> None:
        """Send ``payload`` once. Returns on any 2xx; the response body is ignored."""
        try:
            resp = requests.post(self.url, json=payload, headers=COMMON_HEADERS, timeout=self.timeout)
        except RequestException as e:
            logger.exception("Save food request failed: url=%s", self.url)
            raise SubmissionFailed(f"Save food request failed: {e}") from e

        if 200 <= resp.status_code < 300:
            logger.info("Food donation submitted: status=%s", resp.status_code)
            return

        try:
            data = resp.json()
        except ValueError as e:
            logger.warning("Save food failed with unreadable error body: status=%s", resp.status_code)
            raise SubmissionFailed(f"Save food error body is not JSON (HTTP {resp.status_code})") from e

        message = _error_message(data)
        logger.warning("Save food rejected: status=%s message=%s", resp.status_code, message)
        raise SubmissionRejected(message, status_code=resp.status_code)

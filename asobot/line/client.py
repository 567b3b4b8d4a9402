# asobot/line/client.py

import logging
import time

import requests

from asobot.errors import DependencyError

logger = logging.getLogger(__name__)


class LineAPIError(DependencyError):
    """Base exception for LINE Messaging API errors"""
    def __init__(self, message, status_code=None, response=None):
        self.response = response
        super().__init__(message)
        self.api_status_code = status_code


class LineTimeoutError(LineAPIError):
    """Exception raised when a push request times out"""
    pass


class LineRateLimitError(LineAPIError):
    """Exception raised when rate limited by the API"""
    pass


class LineMessagingClient:
    """Minimal push-message client for the LINE Messaging API.

    Every request carries a timeout; failures are raised as LineAPIError
    (a DependencyError) and never retried here.
    """

    def __init__(self, access_token, api_url='https://api.line.me/v2/bot/message/push', timeout=10, session=None):
        self.access_token = access_token
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def push_text(self, to: str, text: str) -> None:
        """Push a single text message to a user, group or room id."""
        if not self.access_token:
            raise LineAPIError("LINE_CHANNEL_ACCESS_TOKEN is not configured")

        payload = {
            'to': to,
            'messages': [{'type': 'text', 'text': text}],
        }
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.access_token}',
        }

        start_time = time.time()
        try:
            response = self.session.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.Timeout:
            logger.warning(f"LINE push to {to} timed out after {self.timeout}s")
            raise LineTimeoutError(f"Request timed out after {self.timeout} seconds")
        except requests.RequestException as e:
            logger.error(f"LINE push to {to} request error: {str(e)}")
            raise LineAPIError(f"Request error: {str(e)}")

        elapsed = time.time() - start_time
        logger.debug(f"POST {self.api_url} completed in {elapsed:.2f}s with status {response.status_code}")

        if response.status_code == 429:
            raise LineRateLimitError("Rate limit exceeded", status_code=429, response=response)
        if response.status_code >= 400:
            raise LineAPIError(
                f"LINE API error {response.status_code}: {response.text}",
                status_code=response.status_code,
                response=response,
            )

"""JSON-over-HTTP access with bounded exponential backoff."""

import logging
import time
from collections.abc import Callable
from decimal import Decimal
from typing import Any

import requests

from chainledger.exceptions import FetchError

logger = logging.getLogger(__name__)

MAX_RETRIES = 5
INITIAL_BACKOFF = 1.0
REQUEST_TIMEOUT = 30
RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class RetryableResponse(Exception):
    """A response that should be retried (rate limit, transient server error)."""


class JsonHttpClient:
    """Base for API clients: GET a URL and decode JSON with Decimal floats."""

    source = "http"

    def __init__(
        self,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
        max_retries: int = MAX_RETRIES,
    ):
        self.session = session or requests.Session()
        self._sleep = sleep
        self.max_retries = max_retries

    def check_payload(self, payload: Any) -> None:
        """Hook for API-level rate-limit detection; raise RetryableResponse to retry."""

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        last_error: Exception | None = None
        for attempt in range(self.max_retries):
            try:
                response = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT)
                if response.status_code in RETRYABLE_STATUS:
                    raise RetryableResponse(f"HTTP {response.status_code}")
                response.raise_for_status()
                payload = response.json(parse_float=Decimal)
                self.check_payload(payload)
                return payload
            except (requests.ConnectionError, requests.Timeout, RetryableResponse) as exc:
                last_error = exc
                if attempt < self.max_retries - 1:
                    backoff = INITIAL_BACKOFF * (2 ** attempt)
                    logger.warning(
                        "%s request failed (attempt %d/%d): %s. Retrying in %.1fs...",
                        self.source, attempt + 1, self.max_retries, exc, backoff,
                    )
                    self._sleep(backoff)
            except ValueError as exc:
                raise FetchError(self.source, f"invalid JSON response: {exc}") from exc
            except requests.RequestException as exc:
                raise FetchError(self.source, str(exc)) from exc

        raise FetchError(
            self.source, f"request failed after {self.max_retries} attempts: {last_error}"
        )

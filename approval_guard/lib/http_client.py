"""
Shared HTTP plumbing for the node and explorer clients.

Requests that hit a rate limit (429), a server error (5xx) or a dropped
connection are retried with capped exponential backoff and jitter. Timeouts
are never retried: the caller owns the wall-clock budget.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

import requests

logger = logging.getLogger(__name__)

# Retry configuration
DEFAULT_INITIAL_DELAY = 1.0  # seconds
DEFAULT_BACKOFF_MULTIPLIER = 2.0
DEFAULT_MAX_RETRIES = 5
DEFAULT_MAX_DELAY = 32.0  # seconds
DEFAULT_JITTER = 0.1  # ±10%
DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds

REDACTED = "[REDACTED]"


class APIError(Exception):
    """A remote endpoint failed or refused the request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(APIError):
    """Still rate limited after the last retry."""

    pass


class RequestTimeoutError(APIError):
    pass


@dataclass(frozen=True)
class RetryPolicy:
    initial_delay: float = DEFAULT_INITIAL_DELAY
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    max_retries: int = DEFAULT_MAX_RETRIES
    max_delay: float = DEFAULT_MAX_DELAY
    jitter: float = DEFAULT_JITTER

    def delays(self) -> Iterator[float]:
        """Un-jittered wait before each retry, capped at max_delay."""
        delay = self.initial_delay
        for _ in range(self.max_retries):
            yield min(delay, self.max_delay)
            delay *= self.backoff_multiplier


class RetryingHttpClient:
    """
    Base class for clients that talk to a single HTTP endpoint.

    Subclasses send through _execute_with_retry and get retries, error
    translation and redaction of the secret (an API key) for free.
    """

    def __init__(
        self,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
        max_retries: int = DEFAULT_MAX_RETRIES,
        max_delay: float = DEFAULT_MAX_DELAY,
        jitter: float = DEFAULT_JITTER,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        secret: Optional[str] = None,
    ):
        """
        Args:
            initial_delay: Wait before the first retry, in seconds
            backoff_multiplier: Growth factor between retries
            max_retries: Retries after the first attempt
            max_delay: Upper bound for a single wait
            jitter: Fraction of each wait to randomize (0.1 means ±10%)
            timeout: Per-request timeout used when the caller gives none
            secret: Value scrubbed from every error message
        """
        self.retry_policy = RetryPolicy(initial_delay, backoff_multiplier, max_retries, max_delay, jitter)
        self.timeout = timeout
        self.secret = secret
        self.session = requests.Session()

    def _sanitize_error_message(self, message: str) -> str:
        if self.secret:
            message = message.replace(self.secret, REDACTED)
        return message

    def _apply_jitter(self, delay: float) -> float:
        spread = delay * self.retry_policy.jitter
        return delay + random.uniform(-spread, spread)

    def _execute_with_retry(
        self,
        request_func: Callable[[float], requests.Response],
        budget: Optional[float] = None,
    ) -> requests.Response:
        """
        Call request_func until it yields a usable response.

        Args:
            request_func: Sends one attempt with the given timeout in seconds
            budget: Wall-clock bound in seconds for all attempts and waits
                together. Without one, each attempt gets self.timeout.

        Raises:
            RateLimitError: 429 persisted through every retry
            RequestTimeoutError: The request timed out (not retried) or the
                budget ran out before the next retry
            APIError: Rejected credentials, a persistent 5xx or connection
                failure, or any other HTTP error status
        """
        deadline = None if budget is None else time.monotonic() + budget
        delays = self.retry_policy.delays()
        while True:
            attempt_timeout = self.timeout
            if deadline is not None:
                attempt_timeout = deadline - time.monotonic()
                if attempt_timeout <= 0:
                    raise RequestTimeoutError("Request budget exhausted")
            try:
                response = request_func(attempt_timeout)
            except requests.Timeout as e:
                raise RequestTimeoutError(
                    f"Request timed out: {self._sanitize_error_message(str(e))}"
                ) from e
            except requests.RequestException as e:
                failure = APIError(f"Request failed: {self._sanitize_error_message(str(e))}")
                failure.__cause__ = e
            else:
                status = response.status_code
                if status in (401, 403):
                    raise APIError("Unauthorized", status_code=status)
                if status == 429:
                    failure = RateLimitError("Rate limit exceeded and max retries reached", status_code=429)
                elif status >= 500:
                    failure = APIError(f"Server error: {status}", status_code=status)
                else:
                    try:
                        response.raise_for_status()
                    except requests.HTTPError as e:
                        raise APIError(
                            self._sanitize_error_message(str(e)), status_code=status
                        ) from e
                    return response

            delay = next(delays, None)
            if delay is None:
                raise failure
            wait = self._apply_jitter(delay)
            if deadline is not None and time.monotonic() + wait >= deadline:
                raise RequestTimeoutError(
                    f"Request budget exhausted while retrying ({failure})",
                    status_code=failure.status_code,
                ) from failure
            logger.debug("Retrying after %s (waiting %.2fs)", failure, wait)
            time.sleep(wait)

"""Blocking text-completion client backed by the Anthropic Messages API."""

import logging
import time
from typing import Optional

from anthropic import Anthropic, APIConnectionError, APIError, APITimeoutError, RateLimitError

from ..config import (
    ANTHROPIC_API_KEY,
    API_MAX_RETRIES,
    API_RETRY_DELAY,
    API_TIMEOUT,
    COMPLETION_MAX_TOKENS,
    COMPLETION_MODEL,
)

logger = logging.getLogger("quizforge.content")


class CompletionError(Exception):
    """Raised when the endpoint fails or times out after all retries."""
    pass


class CompletionClient:
    """Send one prompt, get one block of text back."""

    def __init__(
        self,
        client: Optional[Anthropic] = None,
        model: str = COMPLETION_MODEL,
        max_tokens: int = COMPLETION_MAX_TOKENS,
        max_retries: int = API_MAX_RETRIES,
        retry_delay: float = API_RETRY_DELAY,
        timeout: float = API_TIMEOUT,
    ):
        # SDK-level retries are disabled; the loop below owns back-off
        self.client = client or Anthropic(api_key=ANTHROPIC_API_KEY, timeout=timeout, max_retries=0)
        self.model = model
        self.max_tokens = max_tokens
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay

    def _api_call_with_retry(self, **kwargs) -> object:
        """Make an Anthropic API call with retry logic for transient errors."""
        last_error = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return self.client.messages.create(**kwargs)
            except RateLimitError as e:
                last_error = e
                wait = self.retry_delay * attempt
                logger.warning("Rate limited (attempt %d/%d), retrying in %.1fs", attempt, self.max_retries, wait)
                time.sleep(wait)
            except APITimeoutError as e:
                last_error = e
                logger.warning("API timeout (attempt %d/%d)", attempt, self.max_retries)
                time.sleep(self.retry_delay)
            except APIConnectionError as e:
                last_error = e
                logger.warning("API connection error (attempt %d/%d): %s", attempt, self.max_retries, e)
                time.sleep(self.retry_delay)
            except APIError as e:
                status_code = getattr(e, "status_code", None)
                if status_code and status_code >= 500:
                    last_error = e
                    logger.warning("API server error %s (attempt %d/%d)", status_code, attempt, self.max_retries)
                    time.sleep(self.retry_delay)
                else:
                    raise
        raise last_error

    def complete(self, prompt: str) -> str:
        try:
            response = self._api_call_with_retry(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIError as e:
            raise CompletionError(f"Completion endpoint unavailable: {e}") from e
        return "".join(
            getattr(block, "text", "") for block in response.content
        )

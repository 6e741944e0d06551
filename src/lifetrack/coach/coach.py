"""Run coach built on the text generation client."""

import logging
import time
from typing import Protocol

from lifetrack.config import CoachConfig
from lifetrack.tracking.models import ActivityRecord

from .client import CoachClient, CoachClientConfig, CoachResponse
from .errors import CoachError
from .prompts import build_motivational_prompt, build_run_summary_prompt

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Anything that turns a prompt into a CoachResponse."""

    def generate(self, prompt: str) -> CoachResponse: ...


class RunCoach:
    """Writes short coaching messages about the user's runs.

    Failures marked retryable (timeouts, lost connections, overloaded API)
    are asked again up to max_retries times, waiting retry_delay * attempt
    seconds before each retry. Other failures are raised at once.
    """

    def __init__(
        self, generator: TextGenerator, max_retries: int = 2, retry_delay: float = 0.5
    ) -> None:
        self._generator = generator
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    @classmethod
    def from_config(cls, config: CoachConfig) -> "RunCoach":
        """Create a coach backed by Claude.

        Raises:
            ValueError: If ANTHROPIC_API_KEY is not set
        """
        return cls(CoachClient(CoachClientConfig.from_env(config)))

    def summarize(self, record: ActivityRecord) -> str:
        """Congratulate the user on a finished run.

        Raises:
            CoachError: If generation fails
        """
        response = self._generate(build_run_summary_prompt(record))
        logger.info(f"Run summary in {response.latency_ms}ms ({response.tokens_used} tokens)")
        return response.text.strip()

    def motivate(self, streak_days: int, recent_activity: bool, mood: str | None = None) -> str:
        """Motivational message for the user's current streak.

        Raises:
            CoachError: If generation fails
        """
        prompt = build_motivational_prompt(streak_days, recent_activity, mood)
        response = self._generate(prompt)
        logger.info(f"Motivation in {response.latency_ms}ms ({response.tokens_used} tokens)")
        return response.text.strip()

    def _generate(self, prompt: str) -> CoachResponse:
        attempt = 0
        while True:
            try:
                return self._generator.generate(prompt)
            except CoachError as e:
                if not e.retryable:
                    logger.error(f"Coach failed ({e.model}, not retrying): {e}")
                    raise
                if attempt >= self._max_retries:
                    logger.error(f"Coach failed after {attempt + 1} attempts: {e}")
                    raise
                attempt += 1
                logger.warning(f"Coach attempt {attempt} failed: {e}")
                time.sleep(self._retry_delay * attempt)


__all__ = ["RunCoach", "TextGenerator"]

"""Claude API client for LifeTrack coaching text.

Sends a prompt and returns generated text.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import anthropic

from lifetrack.coach.errors import (
    CoachAPIError,
    CoachAuthError,
    CoachConnectivityError,
    CoachTimeoutError,
)

if TYPE_CHECKING:
    from lifetrack.config import CoachConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful, supportive AI coach for the 'life.' app that helps users "
    "with their physical, mental, emotional, and spiritual wellbeing."
)


@dataclass
class CoachClientConfig:
    """Configuration for the coach client."""

    api_key: str
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 300
    temperature: float = 0.7
    timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls, settings: "CoachConfig | None" = None) -> "CoachClientConfig":
        """Create config from environment variables.

        Args:
            settings: Optional model settings from the YAML config.

        Returns:
            CoachClientConfig with API key from environment.

        Raises:
            ValueError: If ANTHROPIC_API_KEY is not set.
        """
        api_key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
        if not api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY environment variable is not set. "
                "Set it to use coaching features."
            )
        if settings is None:
            return cls(api_key=api_key)
        return cls(
            api_key=api_key,
            model=settings.model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            timeout_seconds=settings.timeout_seconds,
        )


@dataclass
class CoachResponse:
    """Generated text and request metadata."""

    text: str
    tokens_used: int
    model: str
    latency_ms: int


class CoachClient:
    """Client for Claude text generation."""

    def __init__(self, config: CoachClientConfig) -> None:
        """Initialize coach client.

        Args:
            config: Configuration for the client.
        """
        self._config = config
        self._client = anthropic.Anthropic(
            api_key=config.api_key,
            timeout=config.timeout_seconds,
        )

    def generate(self, prompt: str) -> CoachResponse:
        """Generate text for a prompt.

        Args:
            prompt: The full prompt text.

        Returns:
            CoachResponse with text and metadata.

        Raises:
            CoachTimeoutError: If the request times out.
            CoachAPIError: If the API returns an error.
            CoachAuthError: If authentication fails.
            CoachConnectivityError: If the network is unavailable.
        """
        model = self._config.model
        started = time.perf_counter()

        try:
            response = self._client.messages.create(
                model=model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.AuthenticationError as e:
            raise CoachAuthError(
                "Invalid API key. Please check your ANTHROPIC_API_KEY.", model=model
            ) from e
        except anthropic.APITimeoutError as e:
            # Timeout subclasses connection error, so it must be caught first
            raise CoachTimeoutError(
                f"Request timed out after {self._config.timeout_seconds} seconds.", model=model
            ) from e
        except anthropic.APIConnectionError as e:
            raise CoachConnectivityError(
                f"Failed to connect to Claude API: {e}", model=model
            ) from e
        except anthropic.APIStatusError as e:
            raise CoachAPIError(
                f"API error: {e.message}", status_code=e.status_code, model=model
            ) from e

        latency_ms = int((time.perf_counter() - started) * 1000)
        text = response.content[0].text if response.content else ""
        logger.debug(f"Generated {len(text)} chars with {response.model} in {latency_ms}ms")

        return CoachResponse(
            text=text,
            tokens_used=response.usage.input_tokens + response.usage.output_tokens,
            model=response.model,
            latency_ms=latency_ms,
        )


__all__ = [
    "CoachClient",
    "CoachClientConfig",
    "CoachResponse",
    "SYSTEM_PROMPT",
]

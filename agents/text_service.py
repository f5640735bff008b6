"""
The external text service: paragraph generation and semantic grading.

Everything that talks to the language model goes through `TextService`, so the
lesson code can run against a fake in tests.
"""

from __future__ import annotations

from typing import Optional, Protocol

from mistralai import Mistral

from agents.generator import call_generator_agent
from agents.grader import call_grader_agent
from app.config import Settings, get_settings
from app.errors import ConfigurationError
from app.logging_config import get_logger

logger = get_logger(__name__)

GENERATION_ERROR_TEXT = "Error: Could not generate a lesson. Please try again."


class TextService(Protocol):
    async def generate_sample(self, level: str, topic: str) -> str:
        ...

    async def perform_grading(self, reference_text: str, user_html: str) -> str:
        ...


class MistralTextService:
    def __init__(self, client: Mistral, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or get_settings()

    def _retry_kwargs(self) -> dict:
        return {
            "max_retries": self.settings.max_retries,
            "base_delay": self.settings.retry_base_delay,
            "max_delay": self.settings.retry_max_delay,
        }

    async def generate_sample(self, level: str, topic: str) -> str:
        try:
            text = await call_generator_agent(
                self.client,
                level=level,
                topic=topic,
                model=self.settings.mistral_model,
                temperature=self.settings.generation_temperature,
                **self._retry_kwargs(),
            )
        except Exception:
            logger.exception("Error generating sample text (level=%s, topic=%s)", level, topic)
            return GENERATION_ERROR_TEXT

        if not text:
            logger.warning("Empty paragraph from model (level=%s, topic=%s)", level, topic)
            return GENERATION_ERROR_TEXT
        return text

    async def perform_grading(self, reference_text: str, user_html: str) -> str:
        return await call_grader_agent(
            self.client,
            reference_text=reference_text,
            user_html=user_html,
            model=self.settings.mistral_model,
            temperature=self.settings.grading_temperature,
            **self._retry_kwargs(),
        )


def build_text_service(settings: Optional[Settings] = None, api_key: Optional[str] = None) -> MistralTextService:
    settings = settings or get_settings()
    key = api_key or settings.mistral_api_key
    if not key:
        raise ConfigurationError("MISTRAL_API_KEY is not set")
    return MistralTextService(Mistral(api_key=key), settings)

"""Chat-completion client used to write cover letters and CVs."""
from __future__ import annotations

from abc import ABC, abstractmethod

from careerdesk.config import DEFAULT_OPENAI_MODEL, get_env
from careerdesk.errors import ConfigurationError, UpstreamServiceError
from careerdesk.log import get_logger

log = get_logger(__name__)


class TextGenerator(ABC):
    @abstractmethod
    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        pass


class OpenAIGenerator(TextGenerator):
    """Any OpenAI-compatible endpoint (OpenAI itself, Groq, a local gateway)."""

    def __init__(self, api_key: str, model: str = DEFAULT_OPENAI_MODEL, base_url: str | None = None) -> None:
        from openai import OpenAI

        self.model = model
        self.client = OpenAI(api_key=api_key, base_url=base_url or None)

    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        try:
            r = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as exc:
            log.error("Text generation failed (%s): %s", self.model, exc)
            raise UpstreamServiceError(f"Text generation failed: {exc}") from exc
        if not r.choices:
            raise UpstreamServiceError("Text generation returned no choices")
        return (r.choices[0].message.content or "").strip()


def generator_from_env() -> TextGenerator:
    api_key = get_env("OPENAI_API_KEY")
    if not api_key:
        raise ConfigurationError("OpenAI API key not configured")
    model = get_env("OPENAI_MODEL", DEFAULT_OPENAI_MODEL) or DEFAULT_OPENAI_MODEL
    return OpenAIGenerator(api_key, model=model, base_url=get_env("OPENAI_BASE_URL") or None)

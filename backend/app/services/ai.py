import logging

from app.core.config import get_settings
from app.core.deps import get_llm_client
from app.core.errors import UpstreamGenerationError

logger = logging.getLogger(__name__)


class AIService:
    """The external text generator: generate(prompt) -> text.

    Synchronous and possibly slow; async callers should run it in a thread.
    Any client failure surfaces as UpstreamGenerationError.
    """

    def __init__(self, client=None, settings=None):
        self.settings = settings or get_settings()
        self.client = client or get_llm_client(self.settings)

    def generate(self, prompt: str, system_prompt: str | None = None) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self.client.chat.completions.create(
                model=self.settings.llm_model,
                messages=messages,
                temperature=self.settings.llm_temperature,
                max_tokens=self.settings.llm_max_tokens,
            )
        except Exception as exc:
            logger.error("[ai.generate] generator call failed: %s", exc)
            raise UpstreamGenerationError(exc) from exc

        return response.choices[0].message.content or ""


def get_ai_service() -> AIService:
    return AIService()

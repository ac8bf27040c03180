from typing import Optional, Protocol, runtime_checkable

from openai import AsyncOpenAI

from slidestream.config import LLMSettings, settings
from slidestream.logger import logger


@runtime_checkable
class ContentModel(Protocol):
    """Send a prompt, get text back."""

    async def invoke(self, prompt: str) -> str:
        ...


class OpenAIContentModel:
    """Content model backed by an OpenAI-compatible chat completions API."""

    def __init__(self, llm_settings: Optional[LLMSettings] = None, client: Optional[AsyncOpenAI] = None):
        self.settings = llm_settings or settings.llm_settings
        self.client = client or AsyncOpenAI(
            api_key=self.settings.api_key or None,
            base_url=self.settings.base_url,
            timeout=self.settings.timeout,
        )

    async def invoke(self, prompt: str) -> str:
        logger.debug(f"Invoking {self.settings.model} with {len(prompt)} prompt chars")
        response = await self.client.chat.completions.create(
            model=self.settings.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=self.settings.max_tokens,
            temperature=self.settings.temperature,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

# arogya/llm/client.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Dict, Optional

from openai import OpenAI

from arogya.config import get_settings


class LLMClient(ABC):
    """
    Simple abstraction so we can swap providers if needed.
    """

    @abstractmethod
    def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> str:
        """
        messages: list of {"role": "system"|"user"|"assistant", "content": "..."}
        returns: assistant content as a string
        """
        ...


class OpenAILLMClient(LLMClient):
    """
    Chat completions over any OpenAI-compatible endpoint (Groq by default).
    """

    def __init__(self, model: Optional[str] = None):
        settings = get_settings()
        if not settings.groq_api_key:
            raise RuntimeError(
                "GROQ_API_KEY is not set in environment (.env)."
            )

        self.client = OpenAI(
            api_key=settings.groq_api_key,
            base_url=settings.llm_base_url,
            timeout=settings.llm_timeout,
        )
        self.default_model = model or settings.llm_model
        self.default_temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens

    def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> str:
        completion = self.client.chat.completions.create(
            model=model or self.default_model,
            messages=messages,
            temperature=self.default_temperature if temperature is None else temperature,
            max_tokens=self.max_tokens,
        )
        content = completion.choices[0].message.content
        return content or ""


def get_llm_client() -> LLMClient:
    return OpenAILLMClient()

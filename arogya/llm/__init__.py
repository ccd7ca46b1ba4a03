# arogya/llm/__init__.py
from .client import LLMClient, OpenAILLMClient, get_llm_client

__all__ = ["LLMClient", "OpenAILLMClient", "get_llm_client"]

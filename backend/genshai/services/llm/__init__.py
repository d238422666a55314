"""LLM provider factory."""

from genshai.core.config import settings
from genshai.services.llm.base import BaseLLMProvider


def get_llm_provider() -> BaseLLMProvider:
    """Factory function that returns the configured LLM provider."""
    if settings.llm_provider == "gateway":
        from genshai.services.llm.gateway import GatewayProvider
        return GatewayProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")

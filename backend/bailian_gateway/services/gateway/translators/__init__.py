"""Request/response translators for the Bailian gateway."""
from bailian_gateway.services.gateway.translators.base import BaseTranslator
from bailian_gateway.services.gateway.translators.dashscope import DashScopeTranslator

__all__ = [
    "BaseTranslator",
    "DashScopeTranslator",
    "get_translator",
]


def get_translator(provider: str):
    """
    Get translator instance for provider.

    Args:
        provider: Provider name ("dashscope")

    Returns:
        Translator instance
    """
    if provider == "dashscope":
        return DashScopeTranslator()
    else:
        raise ValueError(f"Unknown provider: {provider}")

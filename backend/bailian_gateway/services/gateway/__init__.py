"""Gateway service modules."""
from bailian_gateway.services.gateway.router import (
    resolve_context,
    ProviderContext,
    get_available_models,
)

__all__ = [
    "resolve_context",
    "ProviderContext",
    "get_available_models",
]

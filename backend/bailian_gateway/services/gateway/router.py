"""Gateway router: model catalogue and per-call provider context."""
import json
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Any
from bailian_gateway.core.config import settings

logger = logging.getLogger(__name__)

PROVIDER = "dashscope"
VISION_MODEL_PREFIX = "qwen-vl"


@dataclass
class ProviderContext:
    """Context information for a DashScope call."""
    provider: str  # "dashscope"
    model_name: str  # Original model name
    model_type: str = "chat"  # "chat" or "embedding"
    vision: bool = False  # Use the multimodal endpoint and part-list messages
    legacy_prompt: bool = False  # Send only the last message as input.prompt
    endpoint: Optional[str] = None  # DashScope base URL
    plugin: Optional[str] = None  # X-DashScope-Plugin header value


# Default model catalogue
# Can be overridden via MODEL_MAPPING environment variable
DEFAULT_MODEL_MAPPING: Dict[str, Dict[str, Any]] = {
    # Qwen chat models
    "qwen-turbo": {
        "provider": "dashscope"
    },
    "qwen-plus": {
        "provider": "dashscope"
    },
    "qwen-max": {
        "provider": "dashscope"
    },
    "qwen-max-longcontext": {
        "provider": "dashscope"
    },
    "qwen-long": {
        "provider": "dashscope"
    },
    # Qwen vision models
    "qwen-vl-plus": {
        "provider": "dashscope",
        "vision": True
    },
    "qwen-vl-max": {
        "provider": "dashscope",
        "vision": True
    },
    # Embedding models
    "text-embedding-v1": {
        "provider": "dashscope",
        "type": "embedding"
    },
    "text-embedding-v2": {
        "provider": "dashscope",
        "type": "embedding"
    },
    "text-embedding-v3": {
        "provider": "dashscope",
        "type": "embedding"
    },
}


def load_model_mapping() -> Dict[str, Dict[str, Any]]:
    """Load model mapping from environment variable or use default."""
    model_mapping_str = getattr(settings, 'MODEL_MAPPING', None)

    if model_mapping_str:
        try:
            # Parse JSON string from environment
            if isinstance(model_mapping_str, str):
                custom_mapping = json.loads(model_mapping_str)
            else:
                custom_mapping = model_mapping_str
            if not isinstance(custom_mapping, dict):
                raise TypeError("MODEL_MAPPING must be a JSON object")

            # Merge with defaults (custom takes precedence)
            merged = DEFAULT_MODEL_MAPPING.copy()
            merged.update(custom_mapping)
            return merged
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Failed to parse MODEL_MAPPING: {e}. Using defaults.")
            return DEFAULT_MODEL_MAPPING

    return DEFAULT_MODEL_MAPPING


# Cache the model mapping
_model_mapping_cache: Optional[Dict[str, Dict[str, Any]]] = None


def get_model_mapping() -> Dict[str, Dict[str, Any]]:
    """Get model mapping (cached)."""
    global _model_mapping_cache
    if _model_mapping_cache is None:
        _model_mapping_cache = load_model_mapping()
    return _model_mapping_cache


def resolve_context(model_name: str) -> ProviderContext:
    """
    Resolve the DashScope context for a model.

    Models missing from the catalogue are still routed (DashScope serves many
    more than are listed); they get flags inferred from the name.

    Args:
        model_name: The model identifier (e.g., "qwen-plus", "qwen-vl-max")

    Returns:
        ProviderContext with endpoint, plugin header and per-model flags

    Raises:
        ValueError: If the model name is empty or mapped to another provider
    """
    if not model_name:
        raise ValueError("Model name is required")

    config = get_model_mapping().get(model_name, {})
    provider = config.get("provider", PROVIDER)
    if provider != PROVIDER:
        raise ValueError(f"Unknown provider: '{provider}' for model '{model_name}'. Supported providers: {PROVIDER}")

    context = ProviderContext(
        provider=provider,
        model_name=model_name,
        model_type=config.get("type", "chat"),
        vision=bool(config.get("vision", model_name.startswith(VISION_MODEL_PREFIX))),
        legacy_prompt=bool(config.get("legacy_prompt", False)),
        endpoint=config.get("endpoint") or settings.DASHSCOPE_BASE_URL,
        plugin=config.get("plugin") or settings.DASHSCOPE_PLUGIN,
    )
    logger.debug(f"Resolved context for {model_name}: {context}")
    return context


def get_available_models(model_type: Optional[str] = None) -> list[str]:
    """
    Get list of available models, optionally filtered by type.

    Args:
        model_type: Optional model type ("chat" or "embedding") to filter by

    Returns:
        List of model names
    """
    mapping = get_model_mapping()

    if model_type:
        return sorted([
            model for model, config in mapping.items()
            if config.get("type", "chat") == model_type
        ])

    return sorted(mapping.keys())

"""Canonical request -> DashScope request."""
import logging
from typing import Any, Dict, List, Optional, Union
from bailian_gateway.models.chat import ChatCompletionRequest, ChatMessage
from bailian_gateway.models.embedding import EmbeddingRequest
from bailian_gateway.services.gateway.errors import ContractError
from bailian_gateway.services.gateway.router import VISION_MODEL_PREFIX
from bailian_gateway.services.gateway.translators.dashscope.schema import (
    RESULT_FORMAT_MESSAGE,
    DashScopeChatRequest,
    DashScopeEmbeddingInput,
    DashScopeEmbeddingParameters,
    DashScopeEmbeddingRequest,
    DashScopeInput,
    DashScopeMessage,
    DashScopeMessagePart,
    DashScopeParameters,
)

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/v1/services/aigc/text-generation/generation"
MULTIMODAL_CHAT_PATH = "/api/v1/services/aigc/multimodal-generation/generation"
EMBEDDINGS_PATH = "/api/v1/services/embeddings/text-embedding/text-embedding"

WEB_SEARCH_PLUGIN = "web_search"


def is_vision_model(model_name: str) -> bool:
    return model_name.startswith(VISION_MODEL_PREFIX)


def get_chat_url(base_url: str, model_name: str, vision: Optional[bool] = None) -> str:
    """Build the generation URL. Vision models use the multimodal endpoint."""
    if vision is None:
        vision = is_vision_model(model_name)
    path = MULTIMODAL_CHAT_PATH if vision else CHAT_PATH
    return f"{base_url.rstrip('/')}{path}"


def get_embeddings_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}{EMBEDDINGS_PATH}"


def build_headers(api_key: str, stream: bool = False, plugin: Optional[str] = None) -> Dict[str, str]:
    """
    Build DashScope request headers.

    Args:
        api_key: DashScope API key
        stream: Add the SSE headers
        plugin: Opaque X-DashScope-Plugin value (channel configuration)

    Returns:
        Headers dict
    """
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }
    if stream:
        headers["Accept"] = "text/event-stream"
        headers["X-DashScope-SSE"] = "enable"
    if plugin:
        headers["X-DashScope-Plugin"] = plugin
    return headers


def _to_vision_parts(message: ChatMessage) -> List[DashScopeMessagePart]:
    parts = []
    for part in message.parse_content():
        if part.type == "text":
            parts.append(DashScopeMessagePart(text=part.text or ""))
        elif part.type == "image_url" and part.image_url is not None:
            parts.append(DashScopeMessagePart(image=part.image_url.url))
        else:
            logger.warning(f"Dropping unsupported content part of type '{part.type}' for vision model")
    return parts


def _web_search_enabled(plugins: Optional[Dict[str, Any]]) -> Optional[bool]:
    """True only for ``{"web_search": {"enable": true}}``. Other plugin keys are ignored."""
    if not plugins:
        return None
    block = plugins.get(WEB_SEARCH_PLUGIN)
    if isinstance(block, dict) and block.get("enable") is True:
        return True
    return None


def build_chat_request(
    request: ChatCompletionRequest,
    *,
    vision: Optional[bool] = None,
    legacy_prompt: bool = False,
) -> DashScopeChatRequest:
    """
    Translate a canonical chat request to a DashScope generation request.

    DashScope format:
    {
        "input": {
            "messages": [
                {"role": "system", "content": "..."},
                {"role": "user", "content": [{"text": "..."}, {"image": "https://..."}]}
            ]
        },
        "parameters": {
            "result_format": "message",
            "incremental_output": true,
            "enable_search": true
        }
    }

    Args:
        request: Canonical chat request
        vision: Use the part-list message form (defaults to the model name prefix)
        legacy_prompt: Send only the last message as ``input.prompt``

    Returns:
        DashScope request (the model travels in the URL, not the body)

    Raises:
        ContractError: If no message has content
    """
    messages = request.non_empty_messages()
    if not messages:
        raise ContractError("At least one message with content is required")

    if vision is None:
        vision = is_vision_model(request.model)

    if legacy_prompt and not vision:
        ds_input = DashScopeInput(prompt=messages[-1].string_content())
    else:
        ds_messages = []
        for msg in messages:
            content: Union[str, List[DashScopeMessagePart]]
            if vision:
                content = _to_vision_parts(msg)
            else:
                content = msg.string_content()
            ds_messages.append(DashScopeMessage(role=msg.role.lower(), content=content))
        ds_input = DashScopeInput(messages=ds_messages)

    parameters = DashScopeParameters(
        result_format=RESULT_FORMAT_MESSAGE,
        incremental_output=request.stream,
        enable_search=_web_search_enabled(request.plugins),
        temperature=request.temperature,
        top_p=request.top_p,
        top_k=request.top_k,
        seed=request.seed,
        max_tokens=request.max_tokens,
        stop=request.stop,
    )

    logger.debug(
        f"Built DashScope request for {request.model}: {len(messages)} messages, "
        f"vision={vision}, legacy_prompt={legacy_prompt}, stream={request.stream}"
    )
    return DashScopeChatRequest(input=ds_input, parameters=parameters)


def build_embedding_request(request: EmbeddingRequest) -> DashScopeEmbeddingRequest:
    """Translate a canonical embedding request."""
    texts = request.texts()
    if not texts:
        raise ContractError("Embedding input must not be empty")
    parameters = DashScopeEmbeddingParameters(text_type=request.text_type) if request.text_type else None
    return DashScopeEmbeddingRequest(
        model=request.model,
        input=DashScopeEmbeddingInput(texts=texts),
        parameters=parameters,
    )

"""DashScope response -> canonical response."""
import logging
from typing import Any, Dict, Optional, Union
from bailian_gateway.models.chat import ChatCompletionRequest, ChatCompletionResponse, Usage
from bailian_gateway.models.embedding import EmbeddingData, EmbeddingResponse
from bailian_gateway.services.gateway.errors import VendorProtocolError
from bailian_gateway.services.gateway.translators.dashscope.errors import map_error
from bailian_gateway.services.gateway.translators.dashscope.output import resolve_output
from bailian_gateway.services.gateway.translators.dashscope.schema import (
    DashScopeChatResponse,
    DashScopeEmbeddingResponse,
    DashScopeUsage,
)

logger = logging.getLogger(__name__)


def _raise_for_error(response: Union[DashScopeChatResponse, DashScopeEmbeddingResponse]) -> None:
    error = map_error(response.error)
    if error is not None:
        logger.error(f"DashScope error {error.code} (request_id={response.request_id}): {error.message}")
        raise VendorProtocolError(error)


def _apply_usage(ds_usage: DashScopeUsage, usage: Optional[Usage]) -> Usage:
    prompt_tokens, completion_tokens = ds_usage.effective_usage()
    if usage is None:
        usage = Usage()
    usage.update(prompt_tokens, completion_tokens)
    return usage


def build_chat_response(
    response: Union[DashScopeChatResponse, Dict[str, Any]],
    request: ChatCompletionRequest,
    usage: Optional[Usage] = None,
) -> ChatCompletionResponse:
    """
    Translate a complete DashScope generation response.

    Args:
        response: DashScope response (model or decoded JSON)
        request: The canonical request that produced it
        usage: Per-call usage slot, overwritten with this response's usage

    Returns:
        Canonical chat completion response

    Raises:
        VendorProtocolError: If the response carries an error code (status 400)
    """
    if not isinstance(response, DashScopeChatResponse):
        response = DashScopeChatResponse.model_validate(response)

    _raise_for_error(response)

    choices = resolve_output(response.output).choices()
    usage = _apply_usage(response.usage, usage)

    return ChatCompletionResponse(
        id=response.request_id,
        model=request.model,
        choices=choices,
        usage=usage.model_copy(),
    )


def build_embedding_response(
    response: Union[DashScopeEmbeddingResponse, Dict[str, Any]],
    model: str,
    usage: Optional[Usage] = None,
) -> EmbeddingResponse:
    """Translate a DashScope text-embedding response."""
    if not isinstance(response, DashScopeEmbeddingResponse):
        response = DashScopeEmbeddingResponse.model_validate(response)

    _raise_for_error(response)

    data = [
        EmbeddingData(index=item.text_index, embedding=item.embedding)
        for item in sorted(response.output.embeddings, key=lambda e: e.text_index)
    ]
    usage = _apply_usage(response.usage, usage)

    return EmbeddingResponse(data=data, model=model, usage=usage.model_copy())

"""DashScope translator - convert to input/parameters format."""
import logging
from typing import Any, Dict, Optional, Tuple
from bailian_gateway.core.config import settings
from bailian_gateway.models.chat import ChatCompletionRequest, ChatCompletionResponse, Usage
from bailian_gateway.models.embedding import EmbeddingRequest, EmbeddingResponse
from bailian_gateway.services.gateway.router import ProviderContext
from bailian_gateway.services.gateway.translators.base import BaseTranslator
from bailian_gateway.services.gateway.translators.dashscope.request import (
    build_chat_request,
    build_embedding_request,
    build_headers,
    get_chat_url,
    get_embeddings_url,
)
from bailian_gateway.services.gateway.translators.dashscope.response import (
    build_chat_response,
    build_embedding_response,
)
from bailian_gateway.services.gateway.translators.dashscope.stream import StreamDecoder

logger = logging.getLogger(__name__)


class DashScopeTranslator(BaseTranslator):
    """Translator for the DashScope (Alibaba Cloud Bailian) API."""

    def __init__(self, base_url: Optional[str] = None, plugin: Optional[str] = None):
        """Initialize DashScope translator.

        Args:
            base_url: DashScope base URL (defaults to settings)
            plugin: X-DashScope-Plugin header value (defaults to settings)
        """
        self.base_url = base_url or settings.DASHSCOPE_BASE_URL
        self.plugin = plugin if plugin is not None else settings.DASHSCOPE_PLUGIN

    def _base_url(self, context: Optional[ProviderContext]) -> str:
        if context and context.endpoint:
            return context.endpoint
        return self.base_url

    def _plugin(self, context: Optional[ProviderContext]) -> Optional[str]:
        if context and context.plugin:
            return context.plugin
        return self.plugin

    def transform_request(
        self,
        request: ChatCompletionRequest,
        context: Optional[ProviderContext] = None,
        api_key: str = "",
    ) -> Tuple[str, Dict[str, Any], Dict[str, str]]:
        """
        Transform a canonical request to DashScope format.

        The model name selects the endpoint; it is not part of the body.

        Returns:
            Tuple of (url, payload, headers)

        Raises:
            ContractError: If no message has content
        """
        vision = context.vision if context else None
        legacy_prompt = context.legacy_prompt if context else False

        ds_request = build_chat_request(request, vision=vision, legacy_prompt=legacy_prompt)
        url = get_chat_url(self._base_url(context), request.model, vision=vision)
        headers = build_headers(api_key, stream=request.stream, plugin=self._plugin(context))
        return url, ds_request.to_payload(), headers

    def normalize_response(
        self,
        response: Dict[str, Any],
        request: ChatCompletionRequest,
        usage: Optional[Usage] = None,
    ) -> ChatCompletionResponse:
        return build_chat_response(response, request, usage)

    def new_stream_decoder(self, request: ChatCompletionRequest, usage: Optional[Usage] = None) -> StreamDecoder:
        return StreamDecoder(request, usage)

    def transform_embedding_request(
        self,
        request: EmbeddingRequest,
        context: Optional[ProviderContext] = None,
        api_key: str = "",
    ) -> Tuple[str, Dict[str, Any], Dict[str, str]]:
        ds_request = build_embedding_request(request)
        url = get_embeddings_url(self._base_url(context))
        headers = build_headers(api_key, plugin=self._plugin(context))
        return url, ds_request.to_payload(), headers

    def normalize_embedding_response(
        self,
        response: Dict[str, Any],
        request: EmbeddingRequest,
        usage: Optional[Usage] = None,
    ) -> EmbeddingResponse:
        return build_embedding_response(response, request.model, usage)

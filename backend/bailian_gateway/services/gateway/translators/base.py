"""Base translator interface."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
from bailian_gateway.models.chat import ChatCompletionRequest, ChatCompletionResponse, Usage
from bailian_gateway.services.gateway.router import ProviderContext


class BaseTranslator(ABC):
    """Base class for request/response translators."""

    @abstractmethod
    def transform_request(
        self,
        request: ChatCompletionRequest,
        context: Optional[ProviderContext] = None,
        api_key: str = "",
    ) -> Tuple[str, Dict[str, Any], Dict[str, str]]:
        """
        Transform a canonical request to the provider-specific format.

        Args:
            request: Canonical chat request
            context: Provider context (optional)
            api_key: Provider API key

        Returns:
            Tuple of (url, payload, headers)
        """
        pass

    @abstractmethod
    def normalize_response(
        self,
        response: Dict[str, Any],
        request: ChatCompletionRequest,
        usage: Optional[Usage] = None,
    ) -> ChatCompletionResponse:
        """
        Normalize a provider-specific response to the canonical format.

        Args:
            response: Provider-specific response dict
            request: The canonical request that produced it
            usage: Per-call usage slot to report token accounting into

        Returns:
            Canonical chat completion response
        """
        pass

    @abstractmethod
    def new_stream_decoder(self, request: ChatCompletionRequest, usage: Optional[Usage] = None):
        """Create the per-call decoder for a streaming response."""
        pass

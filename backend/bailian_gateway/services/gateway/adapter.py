"""DashScope adapter: translate, send, translate back."""
import logging
from typing import AsyncIterator, Optional
from bailian_gateway.models.chat import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatCompletionStreamResponse,
    Usage,
)
from bailian_gateway.models.embedding import EmbeddingRequest, EmbeddingResponse
from bailian_gateway.services.gateway.router import ProviderContext
from bailian_gateway.services.gateway.translators import get_translator
from bailian_gateway.services.gateway.translators.dashscope.stream import StreamDecoder
from bailian_gateway.services.gateway.transport import HTTPTransport

logger = logging.getLogger(__name__)


class DashScopeAdapter:
    """
    Runs one gateway call against DashScope.

    ``usage`` is the call's usage slot. It is written once for non-streaming
    calls and progressively for streams; read it only after the call (or the
    stream) has completed.
    """

    def __init__(
        self,
        context: ProviderContext,
        api_key: str,
        usage: Optional[Usage] = None,
        transport: Optional[HTTPTransport] = None,
    ):
        self.context = context
        self.api_key = api_key
        self.usage = usage if usage is not None else Usage()
        self.transport = transport or HTTPTransport()
        self.translator = get_translator(context.provider)

    async def create_chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        url, payload, headers = self.translator.transform_request(request, self.context, self.api_key)
        http_request = self.transport.new_request("POST", url, payload, headers)

        logger.info(f"Sending DashScope chat request: model={request.model}, messages={len(request.messages)}")
        data = await self.transport.send(http_request)

        response = self.translator.normalize_response(data, request, self.usage)
        logger.info(
            f"DashScope chat completed: id={response.id}, "
            f"prompt_tokens={self.usage.prompt_tokens}, completion_tokens={self.usage.completion_tokens}"
        )
        return response

    async def create_chat_completion_stream(
        self, request: ChatCompletionRequest
    ) -> AsyncIterator[ChatCompletionStreamResponse]:
        """
        Start a streaming call and return its chunk iterator.

        Request translation and the HTTP status check happen before this
        returns; decode and vendor errors are raised from the iterator, which
        stops at the first one.
        """
        if not request.stream:
            request = request.model_copy(update={"stream": True})
        url, payload, headers = self.translator.transform_request(request, self.context, self.api_key)
        http_request = self.transport.new_request("POST", url, payload, headers)

        logger.info(f"Sending DashScope stream request: model={request.model}, messages={len(request.messages)}")
        lines = await self.transport.send_streaming(http_request)
        decoder = self.translator.new_stream_decoder(request, self.usage)
        return self._decode_stream(lines, decoder)

    async def _decode_stream(
        self, lines: AsyncIterator[str], decoder: StreamDecoder
    ) -> AsyncIterator[ChatCompletionStreamResponse]:
        chunk_count = 0
        try:
            async for line in lines:
                chunk = decoder.decode_line(line)
                if chunk is None:
                    continue
                chunk_count += 1
                yield chunk
        finally:
            await lines.aclose()
            logger.info(
                f"DashScope stream finished: {chunk_count} chunks, "
                f"prompt_tokens={self.usage.prompt_tokens}, completion_tokens={self.usage.completion_tokens}"
            )

    async def create_embeddings(self, request: EmbeddingRequest) -> EmbeddingResponse:
        url, payload, headers = self.translator.transform_embedding_request(request, self.context, self.api_key)
        http_request = self.transport.new_request("POST", url, payload, headers)

        logger.info(f"Sending DashScope embedding request: model={request.model}, texts={len(request.texts())}")
        data = await self.transport.send(http_request)
        return self.translator.normalize_embedding_response(data, request, self.usage)

    async def aclose(self) -> None:
        await self.transport.aclose()

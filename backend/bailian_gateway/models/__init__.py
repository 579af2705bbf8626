# Canonical gateway models
from bailian_gateway.models.chat import (
    ChatCompletionChoice,
    ChatCompletionMessage,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatCompletionStreamChoice,
    ChatCompletionStreamDelta,
    ChatCompletionStreamResponse,
    ChatMessage,
    ContentPart,
    ImageURL,
    OpenAIError,
    OpenAIErrorWithStatusCode,
    Usage,
    parse_content,
)
from bailian_gateway.models.embedding import EmbeddingData, EmbeddingRequest, EmbeddingResponse

__all__ = [
    "ChatCompletionChoice",
    "ChatCompletionMessage",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatCompletionStreamChoice",
    "ChatCompletionStreamDelta",
    "ChatCompletionStreamResponse",
    "ChatMessage",
    "ContentPart",
    "ImageURL",
    "OpenAIError",
    "OpenAIErrorWithStatusCode",
    "Usage",
    "parse_content",
    "EmbeddingData",
    "EmbeddingRequest",
    "EmbeddingResponse",
]

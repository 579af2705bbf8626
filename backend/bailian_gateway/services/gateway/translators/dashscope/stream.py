"""Streaming decoder for DashScope SSE responses."""
import json
import logging
from typing import Optional, Union
from pydantic import ValidationError
from bailian_gateway.models.chat import (
    ChatCompletionRequest,
    ChatCompletionStreamChoice,
    ChatCompletionStreamDelta,
    ChatCompletionStreamResponse,
    Usage,
)
from bailian_gateway.services.gateway.errors import StreamClosedError, StreamDecodeError, VendorProtocolError
from bailian_gateway.services.gateway.translators.dashscope.errors import map_error
from bailian_gateway.services.gateway.translators.dashscope.output import resolve_output
from bailian_gateway.services.gateway.translators.dashscope.schema import DashScopeChatResponse

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"


class StreamDecoder:
    """
    Decode one DashScope stream into canonical chunks.

    One instance per streaming call. The decoder owns the text seen so far
    (for cumulative ``output.text`` streams) and writes usage into the call's
    usage slot whenever a line reports non-zero output tokens.

    ``decode_line`` returns one chunk per data line, or None for lines that
    are not data events. After the first error every further call raises
    ``StreamClosedError``.
    """

    def __init__(self, request: ChatCompletionRequest, usage: Optional[Usage] = None):
        self.request = request
        self.usage = usage if usage is not None else Usage()
        self.last_text = ""
        self.failed = False

    def decode_line(self, raw_line: Union[str, bytes]) -> Optional[ChatCompletionStreamResponse]:
        if self.failed:
            raise StreamClosedError("Stream decoder already failed")

        prefix = DATA_PREFIX.encode() if isinstance(raw_line, bytes) else DATA_PREFIX
        if not raw_line.startswith(prefix):
            return None

        payload = raw_line[len(prefix):]
        try:
            if isinstance(payload, bytes):
                payload = payload.decode("utf-8")
            fragment = DashScopeChatResponse.model_validate(json.loads(payload))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            self.failed = True
            logger.error(f"Failed to decode DashScope stream line: {e}")
            raise StreamDecodeError(f"Invalid stream data: {e}") from e

        error = map_error(fragment.error)
        if error is not None:
            self.failed = True
            logger.error(f"DashScope stream error {error.code}: {error.message}")
            raise VendorProtocolError(error)

        return self._to_chunk(fragment)

    def _to_chunk(self, fragment: DashScopeChatResponse) -> ChatCompletionStreamResponse:
        output = resolve_output(fragment.output)
        content = output.delta(self.last_text)
        self.last_text = output.seen_text(self.last_text)

        prompt_tokens, completion_tokens = fragment.usage.effective_usage()
        # Intermediate lines carry zero usage; only the final one is authoritative
        if completion_tokens != 0:
            self.usage.update(prompt_tokens, completion_tokens)

        choice = ChatCompletionStreamChoice(
            index=output.index,
            delta=ChatCompletionStreamDelta(role="assistant", content=content),
            finish_reason=output.finish_reason(),
        )
        return ChatCompletionStreamResponse(
            id=fragment.request_id,
            model=self.request.model,
            choices=[choice],
        )

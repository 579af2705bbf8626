"""Canonical (OpenAI-compatible) chat completion models."""
import time
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


def get_timestamp() -> int:
    """Current Unix timestamp in seconds."""
    return int(time.time())


class ImageURL(BaseModel):
    """Image reference inside an image_url content part."""
    url: str
    detail: Optional[str] = None


class ContentPart(BaseModel):
    """A typed message content part.

    Only ``text`` and ``image_url`` are understood by the gateway; parts of any
    other type keep their raw fields so callers can decide what to do with them.
    """
    model_config = ConfigDict(extra="allow")

    type: str
    text: Optional[str] = None
    image_url: Optional[ImageURL] = None


def _parse_part(part: Any) -> ContentPart:
    if isinstance(part, ContentPart):
        return part
    if isinstance(part, str):
        return ContentPart(type="text", text=part)
    if not isinstance(part, dict):
        return ContentPart(type=type(part).__name__)

    part_type = part.get("type")
    # Untyped parts come back from DashScope as {"text": ...} / {"image": ...}
    if part_type is None:
        if "text" in part:
            part_type = "text"
        elif "image" in part:
            return ContentPart(type="image_url", image_url=ImageURL(url=str(part["image"])))
        else:
            part_type = "unknown"

    if part_type == "text":
        return ContentPart(type="text", text=str(part.get("text") or ""))
    if part_type == "image_url":
        image_url = part.get("image_url") or {}
        if isinstance(image_url, str):
            image_url = {"url": image_url}
        return ContentPart(
            type="image_url",
            image_url=ImageURL(url=str(image_url.get("url", "")), detail=image_url.get("detail")),
        )

    extra = {k: v for k, v in part.items() if k not in ("type", "text", "image_url")}
    return ContentPart(type=str(part_type), **extra)


def parse_content(content: Any) -> List[ContentPart]:
    """Parse a message body into an ordered list of typed content parts."""
    if content is None:
        return []
    if isinstance(content, str):
        return [ContentPart(type="text", text=content)] if content else []
    if isinstance(content, list):
        return [_parse_part(part) for part in content]
    return [_parse_part(content)]


class ChatMessage(BaseModel):
    """Inbound chat message."""
    model_config = ConfigDict(extra="allow")

    role: str
    content: Optional[Union[str, List[Dict[str, Any]]]] = None
    name: Optional[str] = None

    def is_empty(self) -> bool:
        """True when the message carries no content at all."""
        if self.content is None:
            return True
        return len(self.content) == 0

    def string_content(self) -> str:
        """Flatten the content to plain text (text parts joined, others skipped)."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "".join(
            part.text or "" for part in self.parse_content() if part.type == "text"
        )

    def parse_content(self) -> List[ContentPart]:
        return parse_content(self.content)


class ChatCompletionRequest(BaseModel):
    """Chat completion request model."""
    model_config = ConfigDict(extra="allow")

    model: str = Field(..., min_length=1, description="Model identifier")
    messages: List[ChatMessage] = Field(..., description="List of messages")
    stream: bool = Field(False, description="Whether to stream the response")
    temperature: Optional[float] = Field(None, ge=0, le=2, description="Sampling temperature")
    top_p: Optional[float] = Field(None, ge=0, le=1, description="Nucleus sampling parameter")
    top_k: Optional[int] = Field(None, ge=0, description="Top-k sampling parameter")
    seed: Optional[int] = Field(None, ge=0, description="Sampling seed")
    max_tokens: Optional[int] = Field(None, gt=0, description="Maximum tokens to generate")
    stop: Optional[Union[str, List[str]]] = Field(None, description="Stop sequences")
    plugins: Optional[Dict[str, Any]] = Field(
        None, description="Provider plugin options, e.g. {'web_search': {'enable': true}}"
    )

    def non_empty_messages(self) -> List[ChatMessage]:
        return [msg for msg in self.messages if not msg.is_empty()]


class Usage(BaseModel):
    """Token accounting for one call."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def update(self, prompt_tokens: int, completion_tokens: int) -> None:
        """Overwrite the counters; the total is always derived."""
        self.prompt_tokens = prompt_tokens
        self.completion_tokens = completion_tokens
        self.total_tokens = prompt_tokens + completion_tokens


class ChatCompletionMessage(BaseModel):
    role: str = "assistant"
    content: Optional[Union[str, List[ContentPart]]] = None


class ChatCompletionChoice(BaseModel):
    index: int = 0
    message: ChatCompletionMessage
    finish_reason: Optional[str] = None


class ChatCompletionResponse(BaseModel):
    """Chat completion response model."""
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int = Field(default_factory=get_timestamp)
    model: str
    choices: List[ChatCompletionChoice] = Field(default_factory=list)
    usage: Optional[Usage] = None


class ChatCompletionStreamDelta(BaseModel):
    role: Optional[str] = None
    content: Optional[str] = None


class ChatCompletionStreamChoice(BaseModel):
    index: int = 0
    delta: ChatCompletionStreamDelta = Field(default_factory=ChatCompletionStreamDelta)
    finish_reason: Optional[str] = None


class ChatCompletionStreamResponse(BaseModel):
    """Streaming chunk model."""
    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int = Field(default_factory=get_timestamp)
    model: str
    choices: List[ChatCompletionStreamChoice] = Field(default_factory=list)


class OpenAIError(BaseModel):
    """Canonical error body."""
    message: str
    type: str
    param: Optional[str] = None
    code: Optional[Any] = None


class OpenAIErrorWithStatusCode(BaseModel):
    error: OpenAIError
    status_code: int

"""DashScope wire models.

Request and response bodies of the DashScope generation and embedding
services. The API has shipped two output shapes (flat ``output.text`` and
``output.choices``) and two usage shapes (aggregate counters and a per-model
``usage.models`` list); both are accepted here and resolved elsewhere.

Request body:
{
    "input": {"messages": [{"role": "user", "content": "..."}]},
    "parameters": {"result_format": "message", "incremental_output": true}
}

Response body:
{
    "request_id": "...",
    "output": {"choices": [{"finish_reason": "stop", "message": {...}}]},
    "usage": {"input_tokens": 10, "output_tokens": 5, "total_tokens": 15}
}

Errors are embedded at the top level: {"code": "...", "message": "...", "request_id": "..."}
"""
from typing import Any, List, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

RESULT_FORMAT_MESSAGE = "message"


class DashScopeError(BaseModel):
    """Error fragment. An empty ``code`` means no error."""
    model_config = ConfigDict(extra="ignore")

    code: str = ""
    message: str = ""
    request_id: str = ""

    @field_validator("code", "message", "request_id", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

    def is_empty(self) -> bool:
        return not self.code


class _ErrorFragment(DashScopeError):
    """Body that embeds an error fragment at the top level."""

    @field_validator("output", "usage", mode="before", check_fields=False)
    @classmethod
    def null_to_default(cls, v: Any) -> Any:
        # Absent objects may arrive as null
        return {} if v is None else v

    @property
    def error(self) -> DashScopeError:
        return DashScopeError(code=self.code, message=self.message, request_id=self.request_id)


# ----- usage -----

def _zero_if_blank(v: Any) -> int:
    if v is None or v == "":
        return 0
    return int(v)


class DashScopeModelUsage(BaseModel):
    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    model_id: str = ""

    @field_validator("input_tokens", "output_tokens", "total_tokens", mode="before")
    @classmethod
    def blank_to_zero(cls, v: Any) -> int:
        return _zero_if_blank(v)


class DashScopeUsage(BaseModel):
    """Aggregate counters, or a per-sub-model list under ``models``."""
    model_config = ConfigDict(extra="ignore")

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    models: Optional[List[DashScopeModelUsage]] = None

    @field_validator("input_tokens", "output_tokens", "total_tokens", mode="before")
    @classmethod
    def blank_to_zero(cls, v: Any) -> int:
        return _zero_if_blank(v)

    def effective_usage(self) -> Tuple[int, int]:
        """(input, output) tokens. With a ``models`` list the first entry wins."""
        if self.models:
            first = self.models[0]
            return first.input_tokens, first.output_tokens
        return self.input_tokens, self.output_tokens


# ----- chat request -----

class DashScopeMessagePart(BaseModel):
    text: Optional[str] = None
    image: Optional[str] = None


class DashScopeMessage(BaseModel):
    role: str
    content: Union[str, List[DashScopeMessagePart]]


class DashScopeInput(BaseModel):
    prompt: Optional[str] = None
    messages: Optional[List[DashScopeMessage]] = None


class DashScopeParameters(BaseModel):
    result_format: str = RESULT_FORMAT_MESSAGE
    incremental_output: Optional[bool] = None
    enable_search: Optional[bool] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    seed: Optional[int] = None
    max_tokens: Optional[int] = None
    stop: Optional[Union[str, List[str]]] = None


class DashScopeChatRequest(BaseModel):
    input: DashScopeInput
    parameters: DashScopeParameters = Field(default_factory=DashScopeParameters)

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


# ----- chat response -----

class DashScopeChoiceMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str = "assistant"
    content: Any = None


class DashScopeChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: Optional[int] = None
    finish_reason: Optional[str] = None
    message: DashScopeChoiceMessage = Field(default_factory=DashScopeChoiceMessage)

    @field_validator("message", mode="before")
    @classmethod
    def null_to_default(cls, v: Any) -> Any:
        return {} if v is None else v


class DashScopeOutput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: Optional[str] = None
    choices: Optional[List[DashScopeChoice]] = None
    finish_reason: Optional[str] = None
    session_id: Optional[str] = None


class DashScopeChatResponse(_ErrorFragment):
    output: DashScopeOutput = Field(default_factory=DashScopeOutput)
    usage: DashScopeUsage = Field(default_factory=DashScopeUsage)


# ----- embeddings -----

class DashScopeEmbeddingInput(BaseModel):
    texts: List[str]


class DashScopeEmbeddingParameters(BaseModel):
    text_type: Optional[str] = None


class DashScopeEmbeddingRequest(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model: str
    input: DashScopeEmbeddingInput
    parameters: Optional[DashScopeEmbeddingParameters] = None

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


class DashScopeEmbedding(BaseModel):
    embedding: List[float]
    text_index: int = 0


class DashScopeEmbeddingOutput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    embeddings: List[DashScopeEmbedding] = Field(default_factory=list)

    @field_validator("embeddings", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class DashScopeEmbeddingResponse(_ErrorFragment):
    output: DashScopeEmbeddingOutput = Field(default_factory=DashScopeEmbeddingOutput)
    usage: DashScopeUsage = Field(default_factory=DashScopeUsage)

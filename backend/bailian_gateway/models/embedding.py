"""Canonical (OpenAI-compatible) embedding models."""
from typing import List, Literal, Optional, Union
from pydantic import BaseModel, Field
from bailian_gateway.models.chat import Usage


class EmbeddingRequest(BaseModel):
    """Embedding request model."""
    model: str = Field(..., min_length=1, description="Model identifier")
    input: Union[str, List[str]] = Field(..., description="Text or list of texts to embed")
    text_type: Optional[str] = Field(None, description="DashScope text_type: 'query' or 'document'")

    def texts(self) -> List[str]:
        return [self.input] if isinstance(self.input, str) else list(self.input)


class EmbeddingData(BaseModel):
    object: Literal["embedding"] = "embedding"
    index: int
    embedding: List[float]


class EmbeddingResponse(BaseModel):
    """Embedding response model."""
    object: Literal["list"] = "list"
    data: List[EmbeddingData] = Field(default_factory=list)
    model: str
    usage: Usage

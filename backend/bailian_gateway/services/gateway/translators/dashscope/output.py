"""Output shape variants.

DashScope answers either with a flat ``output.text`` (legacy, cumulative when
streamed) or with ``output.choices`` (structured, incremental when streamed
with ``incremental_output``). The shape is resolved once per body by
``resolve_output`` and everything downstream goes through ``OutputVariant``.
"""
from abc import ABC, abstractmethod
from typing import Any, List, Optional
from bailian_gateway.models.chat import ChatCompletionChoice, ChatCompletionMessage, parse_content
from bailian_gateway.services.gateway.translators.dashscope.schema import DashScopeChoice, DashScopeOutput


def normalize_finish_reason(value: Optional[str]) -> Optional[str]:
    """DashScope sends "" or the literal "null" while still generating."""
    if not value or value == "null":
        return None
    return value


def content_to_text(content: Any) -> str:
    """Flatten choice content (string or part list) to text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return "".join(part.text or "" for part in parse_content(content) if part.type == "text")


class OutputVariant(ABC):
    """Shared interface of the two output shapes."""

    def __init__(self, output: DashScopeOutput):
        self.output = output

    @property
    def index(self) -> int:
        return 0

    @abstractmethod
    def delta(self, seen: str) -> str:
        """Text to emit for this stream fragment, given the text seen so far."""

    @abstractmethod
    def seen_text(self, seen: str) -> str:
        """Text seen so far once this fragment has been emitted."""

    @abstractmethod
    def finish_reason(self) -> Optional[str]:
        pass

    @abstractmethod
    def choices(self) -> List[ChatCompletionChoice]:
        """Canonical choices for a complete (non-streaming) body."""


class FlatTextOutput(OutputVariant):
    """Legacy ``output.text``. Streamed fragments resend the full text so far."""

    @property
    def text(self) -> str:
        return self.output.text or ""

    def delta(self, seen: str) -> str:
        if seen and self.text.startswith(seen):
            return self.text[len(seen):]
        return self.text

    def seen_text(self, seen: str) -> str:
        return self.text

    def finish_reason(self) -> Optional[str]:
        return normalize_finish_reason(self.output.finish_reason)

    def choices(self) -> List[ChatCompletionChoice]:
        return [
            ChatCompletionChoice(
                index=0,
                message=ChatCompletionMessage(role="assistant", content=self.text),
                finish_reason=self.finish_reason(),
            )
        ]


class StructuredOutput(OutputVariant):
    """``output.choices``. Streamed fragments carry only the new text."""

    @property
    def first(self) -> DashScopeChoice:
        return self.output.choices[0]

    @property
    def index(self) -> int:
        return self.first.index or 0

    def delta(self, seen: str) -> str:
        return content_to_text(self.first.message.content)

    def seen_text(self, seen: str) -> str:
        return seen + self.delta(seen)

    def finish_reason(self) -> Optional[str]:
        return normalize_finish_reason(self.first.finish_reason) or normalize_finish_reason(
            self.output.finish_reason
        )

    def choices(self) -> List[ChatCompletionChoice]:
        choices = []
        for i, choice in enumerate(self.output.choices):
            content = choice.message.content
            # Structured content echoed back (e.g. by qwen-vl) is exposed as typed parts
            if content is not None and not isinstance(content, str):
                content = parse_content(content)
            choices.append(
                ChatCompletionChoice(
                    index=choice.index if choice.index is not None else i,
                    message=ChatCompletionMessage(
                        role=(choice.message.role or "assistant").lower(),
                        content=content,
                    ),
                    finish_reason=normalize_finish_reason(choice.finish_reason)
                    or normalize_finish_reason(self.output.finish_reason),
                )
            )
        return choices


def resolve_output(output: DashScopeOutput) -> OutputVariant:
    """Pick the variant by which field is populated."""
    if output.choices:
        return StructuredOutput(output)
    return FlatTextOutput(output)

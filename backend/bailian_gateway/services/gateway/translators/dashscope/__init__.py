"""DashScope (Alibaba Cloud Bailian) translator."""
from bailian_gateway.services.gateway.translators.dashscope.errors import map_error, map_error_body
from bailian_gateway.services.gateway.translators.dashscope.request import (
    build_chat_request,
    build_headers,
    get_chat_url,
    is_vision_model,
)
from bailian_gateway.services.gateway.translators.dashscope.response import build_chat_response
from bailian_gateway.services.gateway.translators.dashscope.stream import StreamDecoder
from bailian_gateway.services.gateway.translators.dashscope.translator import DashScopeTranslator

__all__ = [
    "DashScopeTranslator",
    "StreamDecoder",
    "build_chat_request",
    "build_chat_response",
    "build_headers",
    "get_chat_url",
    "is_vision_model",
    "map_error",
    "map_error_body",
]

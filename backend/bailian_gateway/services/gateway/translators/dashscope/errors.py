"""DashScope error mapping."""
import json
import logging
from typing import Optional
from pydantic import ValidationError
from bailian_gateway.models.chat import OpenAIError
from bailian_gateway.services.gateway.translators.dashscope.schema import DashScopeError

logger = logging.getLogger(__name__)


def map_error(error: Optional[DashScopeError]) -> Optional[OpenAIError]:
    """Convert a DashScope error fragment to the canonical error.

    Returns None when ``code`` is empty, which is how DashScope says "no error".
    The code is used as both ``type`` and ``code``; the request id goes in
    ``param`` so it shows up in client-side diagnostics.
    """
    if error is None or error.is_empty():
        return None
    return OpenAIError(
        message=error.message,
        type=error.code,
        param=error.request_id or None,
        code=error.code,
    )


def map_error_body(body: bytes) -> Optional[OpenAIError]:
    """Map the body of a non-2xx DashScope response.

    Returns None when the body is not a DashScope error fragment.
    """
    try:
        error = DashScopeError.model_validate(json.loads(body))
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError, TypeError) as e:
        logger.debug(f"Could not decode DashScope error body: {e}")
        return None
    return map_error(error)

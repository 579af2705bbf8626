"""Gateway exceptions.

Every gateway error carries a canonical ``OpenAIError`` and the HTTP status the
API layer should answer with. Transport failures are not wrapped: they reach
the caller as the ``httpx.RequestError`` raised by the transport.
"""
from typing import Optional
from bailian_gateway.models.chat import OpenAIError, OpenAIErrorWithStatusCode


class GatewayError(Exception):
    """Base exception for gateway errors."""

    status_code: int = 500
    error_type: str = "gateway_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error: Optional[OpenAIError] = None,
    ):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        self.error = error or OpenAIError(message=message, type=self.error_type, code=self.error_type)

    def to_openai_error(self) -> OpenAIErrorWithStatusCode:
        return OpenAIErrorWithStatusCode(error=self.error, status_code=self.status_code)


class ContractError(GatewayError):
    """Caller-supplied request violates a precondition. Raised before any network call."""

    status_code = 400
    error_type = "invalid_request_error"


class VendorProtocolError(GatewayError):
    """DashScope reported an error (embedded error fragment or error body)."""

    status_code = 400
    error_type = "dashscope_error"

    def __init__(self, error: OpenAIError, status_code: Optional[int] = None):
        super().__init__(error.message, status_code=status_code, error=error)


class StreamDecodeError(GatewayError):
    """A stream event could not be decoded as JSON."""

    error_type = "dashscope_stream_decode_error"


class StreamClosedError(GatewayError):
    """A stream decoder was used after it failed."""

    error_type = "stream_closed"


class UpstreamHTTPError(GatewayError):
    """DashScope answered with a non-2xx status or an unreadable body."""

    status_code = 502
    error_type = "dashscope_http_error"

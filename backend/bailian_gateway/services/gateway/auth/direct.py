"""Direct API key authenticator."""
import logging
from typing import Optional
from bailian_gateway.core.config import settings
from bailian_gateway.services.gateway.router import ProviderContext

logger = logging.getLogger(__name__)


class DirectAuthenticator:
    """Authenticator for DashScope API keys.

    Uses the configured DASHSCOPE_API_KEY; when none is configured the caller's
    ``Authorization: Bearer <key>`` header is passed through.
    """

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.DASHSCOPE_API_KEY

    async def get_token(
        self,
        auth_header: Optional[str] = None,
        context: Optional[ProviderContext] = None,
    ) -> str:
        """Get the DashScope API key.

        Args:
            auth_header: Caller's Authorization header (fallback)
            context: Provider context (used for logging)

        Returns:
            API key string

        Raises:
            ValueError: If no key is configured and none was passed through
        """
        provider = context.provider if context else "dashscope"

        if self.api_key:
            logger.debug(f"Using configured API key for {provider}")
            return self.api_key

        if auth_header and auth_header.lower().startswith("bearer "):
            token = auth_header[7:].strip()
            if token:
                logger.debug(f"Using caller-supplied API key for {provider}")
                return token

        raise ValueError(
            f"API key not configured for provider '{provider}'. "
            "Set DASHSCOPE_API_KEY or send an Authorization: Bearer header."
        )

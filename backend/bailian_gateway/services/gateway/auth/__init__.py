"""Authentication adapters for the Bailian gateway."""
from bailian_gateway.services.gateway.auth.direct import DirectAuthenticator

__all__ = [
    "DirectAuthenticator",
]

from homealign_sdk.config import ClientConfig, ConfigError, load_config
from homealign_sdk.credential_store import CredentialStorage
from homealign_sdk.errors import ApiError, AuthenticationError, NetworkError
from homealign_sdk.http_client import REFERENCE_LISTS, ApiGateway
from homealign_sdk.models import BulkOutcome, ListQuery, PageEnvelope
from homealign_sdk.session import SessionStore

__all__ = [
    "ClientConfig",
    "ConfigError",
    "load_config",
    "CredentialStorage",
    "ApiError",
    "AuthenticationError",
    "NetworkError",
    "ApiGateway",
    "REFERENCE_LISTS",
    "BulkOutcome",
    "ListQuery",
    "PageEnvelope",
    "SessionStore",
]

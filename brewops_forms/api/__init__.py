"""REST client and credential handling for the BrewOps backend."""

from brewops_forms.api.client import BrewOpsClient
from brewops_forms.api.credentials import (
    CredentialProvider,
    CurrentUser,
    InvalidTokenError,
    SessionFileCredentials,
    StaticCredentials,
    current_user,
    decode_claims,
)
from brewops_forms.api.envelope import ApiEnvelope
from brewops_forms.api.errors import ApiError, ResponseParseError, ServerError, TransportError

__all__ = [
    # Client
    "ApiEnvelope",
    "BrewOpsClient",
    # Errors
    "ApiError",
    "ResponseParseError",
    "ServerError",
    "TransportError",
    # Credentials
    "CredentialProvider",
    "CurrentUser",
    "InvalidTokenError",
    "SessionFileCredentials",
    "StaticCredentials",
    "current_user",
    "decode_claims",
]

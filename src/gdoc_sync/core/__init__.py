"""Remote collaborators: Google Docs client, OAuth token provider."""

from .async_utils import run_sync
from .client import DocumentStore, GoogleDocsClient
from .errors import AuthenticationError, DocumentStoreError
from .oauth import OAuthTokenProvider, TokenProvider

__all__ = [
    "AuthenticationError",
    "DocumentStore",
    "DocumentStoreError",
    "GoogleDocsClient",
    "OAuthTokenProvider",
    "TokenProvider",
    "run_sync",
]

"""Exceptions raised by the remote collaborators."""


class DocumentStoreError(Exception):
    """The remote document store rejected or failed a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(DocumentStoreError):
    """No valid access token could be obtained or the token was refused."""

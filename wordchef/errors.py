# =============================================================================
# WordChef Client - Error Types
# =============================================================================
# Exception hierarchy raised by the API client. Every error carries a short
# user-facing message; the query session and CLI display that message and
# let the user retry by hand. Nothing here is retried automatically.
# =============================================================================

from typing import Optional


class WordChefError(Exception):
    """Base class for all client errors. ``str(exc)`` is the user-facing text."""


class InvalidInputError(WordChefError):
    """Raised before any network call when the query cannot form a valid URL."""


class NetworkError(WordChefError):
    """Base class for failures of the HTTP round trip itself."""


class TransportError(NetworkError):
    """Connection-level failure (DNS, refused connection, TLS, reset)."""


class ServerError(NetworkError):
    """
    The server answered with a non-200 status.

    Args:
        endpoint:    Short endpoint name used in the message (e.g. "Nearest").
        status_code: HTTP status returned by the server.
    """

    def __init__(self, endpoint: str, status_code: Optional[int] = None):
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(f"{endpoint} API server error")


class DecodeError(WordChefError):
    """Malformed JSON, a body that does not match the schema, or a bad image."""


class EmptyResultError(WordChefError):
    """The nearest endpoint returned no neighbors."""

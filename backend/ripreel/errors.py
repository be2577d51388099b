"""Error taxonomy shared by webhook handlers and services."""

from __future__ import annotations


class RipreelError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class WebhookValidationError(RipreelError):
    """A required payload field is missing or malformed."""

    status_code = 400


class NotFoundError(RipreelError):
    """The row referenced by a payload or path does not exist."""

    status_code = 404


class ConflictError(RipreelError):
    """The row is not in a state that allows the requested transition."""

    status_code = 409


class PersistenceError(RipreelError):
    """A data-store write failed."""

    status_code = 500


class UpstreamFetchError(RipreelError):
    """Downloading a provider's temporary asset URL failed.

    Never surfaces to the caller; handlers fall back to the temporary URL.
    """

    status_code = 502

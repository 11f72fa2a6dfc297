from __future__ import annotations


class StorytellerError(Exception):
    """Base class for errors raised by the snapshot collector."""


class ConfigurationError(StorytellerError):
    """Required configuration is missing; nothing upstream was contacted."""


class NotionError(StorytellerError):
    """The content database could not be read."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BlobStoreError(StorytellerError):
    """A blob write was rejected by the storage backend."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

"""
Exception types for topicnews.
"""


class TopicNewsError(Exception):
    """Base class for all topicnews errors."""


class StorageError(TopicNewsError):
    """Raised by a key-value store when a read or write fails."""


class PersistenceReadError(TopicNewsError):
    """The stored preference list could not be read or decoded."""


class PersistenceWriteError(TopicNewsError):
    """The preference list could not be written to storage."""


class FetchError(TopicNewsError):
    """
    A request to the article search API failed.

    Covers network errors, non-2xx statuses, undecodable bodies and
    payloads that are not JSON objects.
    """
    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.status = status

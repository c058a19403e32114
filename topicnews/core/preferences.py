"""
Preference list management for topicnews.
"""
import json
import logging
from typing import Callable, List

from topicnews.errors import (
    PersistenceReadError,
    PersistenceWriteError,
    StorageError,
)

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "preferences"

Listener = Callable[[List[str]], None]

class PreferenceStore:
    """
    Owns the ordered list of topics and keeps it in a key-value store.

    Duplicates are allowed: ``add`` appends whatever it is given (once
    trimmed and non-blank) and ``remove`` drops every copy of a topic.
    """
    def __init__(self, storage, key: str = PREFERENCES_KEY):
        """
        Initialize the PreferenceStore.

        Args:
            storage: Object with async ``get(key)`` and ``set(key, value)``
            key: Storage key the serialized list lives under
        """
        self.storage = storage
        self.key = key
        self._topics: List[str] = []
        self._listeners: List[Listener] = []

    @property
    def topics(self) -> List[str]:
        """A copy of the current preference list."""
        return list(self._topics)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked with the new list after every change.

        Returns:
            A function that removes the callback again
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.topics)
            except Exception:
                logger.exception("Preference listener failed")

    @staticmethod
    def _decode(payload: str) -> List[str]:
        try:
            value = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise PersistenceReadError(f"Stored preferences are not valid JSON: {e}") from e
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise PersistenceReadError("Stored preferences are not a JSON array of strings")
        return value

    async def load(self) -> List[str]:
        """
        Load the preference list from storage.

        A missing key leaves the list empty. Unreadable storage or an
        undecodable payload is logged and the current list is kept.

        Returns:
            The preference list after loading
        """
        try:
            try:
                payload = await self.storage.get(self.key)
            except StorageError as e:
                raise PersistenceReadError(str(e)) from e
            if payload:
                self._topics = self._decode(payload)
                logger.debug(f"Loaded {len(self._topics)} preferences")
        except PersistenceReadError as e:
            logger.error(f"Failed to load preferences: {e}")
        return self.topics

    async def persist(self, topics: List[str]) -> bool:
        """
        Serialize a preference list and write it to storage.

        Failures are logged and swallowed; in-memory state is never touched.

        Args:
            topics: The list to write

        Returns:
            True if the write succeeded, False otherwise
        """
        try:
            try:
                payload = json.dumps(list(topics))
                await self.storage.set(self.key, payload)
            except (StorageError, TypeError, ValueError) as e:
                raise PersistenceWriteError(str(e)) from e
        except PersistenceWriteError as e:
            logger.error(f"Failed to save preferences: {e}")
            return False
        return True

    async def add(self, topic: str) -> bool:
        """
        Append a topic to the end of the list.

        Args:
            topic: Raw user input; surrounding whitespace is stripped

        Returns:
            False if the topic was blank and nothing changed, True otherwise
        """
        topic = (topic or "").strip()
        if not topic:
            return False

        self._topics = self._topics + [topic]
        logger.info(f"Added topic {topic!r}")
        await self.persist(self._topics)
        self._notify()
        return True

    async def remove(self, topic: str) -> None:
        """
        Remove every occurrence of a topic, keeping the order of the rest.

        Args:
            topic: Exact topic string to remove
        """
        self._topics = [t for t in self._topics if t != topic]
        logger.info(f"Removed topic {topic!r}")
        await self.persist(self._topics)
        self._notify()

"""
Article feed state for topicnews.

The feed owns the article list shown to the user and re-queries the search
API whenever the preference list changes.

Overlapping refetches are not ordered: whichever response completes last
replaces the article list, even when it answers an older query. Setting
``sequence_guard`` drops responses older than the one already applied.
"""
import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Set

from topicnews.core.article import Article
from topicnews.errors import FetchError

logger = logging.getLogger(__name__)

Listener = Callable[[List[Article]], None]

class FeedState(Enum):
    IDLE = "idle"
    QUERYING = "querying"
    READY = "ready"
    STALE_READY = "stale_ready"

class NewsFeed:
    """
    Holds the current article list and the query state.
    """
    def __init__(self, fetcher, sequence_guard: bool = False):
        """
        Initialize the NewsFeed.

        Args:
            fetcher: Object with an async ``fetch_articles(topics)`` method
            sequence_guard: Discard responses older than the applied one
        """
        self.fetcher = fetcher
        self.sequence_guard = sequence_guard
        self.state = FeedState.IDLE
        self._articles: List[Article] = []
        self._listeners: List[Listener] = []
        self._tasks: Set[asyncio.Task] = set()
        self._settled_state = FeedState.IDLE
        self._issued = 0
        self._applied = 0
        self._in_flight = 0

    @property
    def articles(self) -> List[Article]:
        """A copy of the current article list."""
        return list(self._articles)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked with the new article list after each update.

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
                listener(self.articles)
            except Exception:
                logger.exception("Article listener failed")

    def mark_stale(self) -> None:
        """Flag the current result as answering an outdated preference list."""
        if self.state in (FeedState.QUERYING, FeedState.READY):
            self.state = FeedState.STALE_READY
        if self._settled_state == FeedState.READY:
            self._settled_state = FeedState.STALE_READY

    async def refetch(self, preferences: List[str]) -> bool:
        """
        Query the search API for the given preferences and replace the articles.

        On failure the error is logged and the previous articles are kept.

        Args:
            preferences: Non-empty preference list

        Returns:
            True if the article list was replaced, False otherwise
        """
        if not preferences:
            logger.warning("refetch called with no preferences; ignoring")
            return False

        self._issued += 1
        sequence = self._issued
        self._in_flight += 1
        self.state = FeedState.QUERYING

        articles = None
        try:
            articles = await self.fetcher.fetch_articles(list(preferences))
        except FetchError as e:
            logger.error(f"Failed to fetch news: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error fetching news: {e}")
        finally:
            self._in_flight -= 1

        if articles is None:
            if self._in_flight == 0:
                self.state = self._settled_state
            return False

        if self.sequence_guard and sequence < self._applied:
            logger.debug(f"Discarding response #{sequence}; #{self._applied} already applied")
            if self._in_flight == 0:
                self.state = self._settled_state
            return False

        self._applied = sequence
        self._articles = list(articles)
        self._settled_state = FeedState.READY
        self.state = FeedState.READY if self._in_flight == 0 else FeedState.STALE_READY
        logger.info(f"Showing {len(self._articles)} articles (request #{sequence})")
        self._notify()
        return True

    def on_preferences_changed(self, preferences: List[str]) -> Optional[asyncio.Task]:
        """
        Preference listener: schedule a refetch for a non-empty list.

        Must be called from inside a running event loop.

        Returns:
            The scheduled task, or None when the list is empty
        """
        self.mark_stale()
        if not preferences:
            logger.debug("Preference list is empty; not fetching")
            return None

        task = asyncio.ensure_future(self.refetch(preferences))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait until every scheduled refetch has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

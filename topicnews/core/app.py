"""
Application wiring for topicnews.
"""
import logging
from typing import List, Optional

from topicnews.config import Config, config as default_config
from topicnews.core.article import Article
from topicnews.core.feed import NewsFeed
from topicnews.core.preferences import PreferenceStore
from topicnews.core.storage import SqliteKeyValueStore
from topicnews.fetchers.newsapi import NewsApiFetcher

logger = logging.getLogger(__name__)

class NewsApp:
    """
    Connects the preference store to the article feed.

    Every change to the preferences schedules a refetch; the view reads
    ``preferences`` and ``articles`` and calls ``add_topic``/``remove_topic``.
    """
    def __init__(self, store: PreferenceStore, feed: NewsFeed):
        self.store = store
        self.feed = feed
        self._unsubscribe = None
        self.attach()

    def attach(self) -> None:
        """Refetch articles whenever the preferences change."""
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self.feed.on_preferences_changed)

    def detach(self) -> None:
        """Stop reacting to preference changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None) -> "NewsApp":
        """
        Build an app with SQLite storage and the NewsAPI fetcher.

        Args:
            cfg: Configuration to use; defaults to the global one
        """
        cfg = cfg or default_config
        storage = SqliteKeyValueStore(cfg.get('storage.path', 'topicnews.db'))
        store = PreferenceStore(storage, key=cfg.get('storage.key', 'preferences'))
        fetcher = NewsApiFetcher(
            api_key=cfg.get('newsapi.api_key'),
            base_url=cfg.get('newsapi.base_url'),
            language=cfg.get('newsapi.language'),
            sort_by=cfg.get('newsapi.sort_by'),
            timeout=cfg.get('newsapi.timeout_seconds'),
        )
        feed = NewsFeed(fetcher, sequence_guard=bool(cfg.get('feed.sequence_guard', False)))
        return cls(store, feed)

    @property
    def preferences(self) -> List[str]:
        return self.store.topics

    @property
    def articles(self) -> List[Article]:
        return self.feed.articles

    async def start(self) -> None:
        """Load stored preferences and fetch articles for them."""
        await self.store.load()
        if not await self.refresh() and not self.preferences:
            logger.info("No stored preferences; waiting for a topic")

    async def add_topic(self, topic: str) -> bool:
        return await self.store.add(topic)

    async def remove_topic(self, topic: str) -> None:
        await self.store.remove(topic)

    async def settle(self) -> None:
        """Wait for refetches triggered by earlier changes."""
        await self.feed.wait_idle()

    async def refresh(self) -> bool:
        """Refetch articles for the current preferences, if there are any."""
        topics = self.store.topics
        if not topics:
            return False
        return await self.feed.refetch(topics)

    async def close(self) -> None:
        self.detach()
        await self.feed.wait_idle()
        close_session = getattr(self.feed.fetcher, 'close_session', None)
        if close_session is not None:
            await close_session()

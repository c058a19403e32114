"""
NewsAPI article fetcher for topicnews.
"""
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote
import aiohttp
import async_timeout

from topicnews.config import get_config
from topicnews.core.article import Article
from topicnews.errors import FetchError

# Configure logging
logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves alone, beyond quote()'s own safe set
QUERY_SAFE_CHARS = "!'()*~"

def build_query(topics: List[str]) -> str:
    """
    Join topics into a single disjunctive search query.

    Args:
        topics: Preference list, used as-is (no dedup, no escaping)

    Returns:
        The unencoded query, e.g. ``'ai OR climate'``
    """
    return " OR ".join(topics)

def extract_articles(payload: Any) -> List[Article]:
    """
    Pull the article list out of a decoded search response.

    A missing, null or non-list ``articles`` field yields an empty list.
    Entries without a URL are skipped.

    Raises:
        FetchError: If the payload is not a JSON object
    """
    if not isinstance(payload, dict):
        raise FetchError(f"Unexpected response type: {type(payload).__name__}")

    items = payload.get('articles')
    if not isinstance(items, list):
        return []

    articles = []
    for item in items:
        article = Article.from_api(item)
        if article is None:
            logger.debug(f"Skipping malformed article entry: {item!r}")
            continue
        articles.append(article)
    return articles

class NewsApiFetcher:
    """
    Queries a NewsAPI-compatible ``everything`` endpoint.
    """
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        language: Optional[str] = None,
        sort_by: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize the NewsApiFetcher. Unset arguments come from configuration.

        Args:
            api_key: NewsAPI credential
            base_url: Search endpoint URL
            language: Language filter
            sort_by: Sort order
            timeout: Request timeout in seconds, None for no limit
            session: Existing aiohttp session; the fetcher will not close it
        """
        self.api_key = api_key or get_config('newsapi.api_key')
        self.base_url = base_url or get_config('newsapi.base_url')
        self.language = language or get_config('newsapi.language', 'en')
        self.sort_by = sort_by or get_config('newsapi.sort_by', 'publishedAt')
        self.timeout = timeout if timeout is not None else get_config('newsapi.timeout_seconds')
        self._session = session
        self._owns_session = session is None

    @property
    def session(self):
        """
        Lazy initialization of aiohttp session.

        Returns:
            aiohttp.ClientSession: The HTTP session
        """
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close_session(self):
        """Close aiohttp session."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    def build_url(self, topics: List[str]) -> str:
        """
        Build the full request URL for a preference list.

        Args:
            topics: Non-empty preference list

        Returns:
            The URL with percent-encoded query and fixed parameters
        """
        query = quote(build_query(topics), safe=QUERY_SAFE_CHARS)
        return (
            f"{self.base_url}?q={query}"
            f"&language={quote(self.language)}"
            f"&sortBy={quote(self.sort_by)}"
            f"&apiKey={quote(self.api_key or '', safe='')}"
        )

    @staticmethod
    def _error_message(body: str) -> str:
        try:
            data = json.loads(body)
        except ValueError:
            return body[:200]
        if isinstance(data, dict) and data.get('message'):
            return str(data['message'])
        return body[:200]

    async def fetch_articles(self, topics: List[str]) -> List[Article]:
        """
        Search for articles matching any of the given topics.

        Args:
            topics: Non-empty preference list

        Returns:
            List of Article objects, possibly empty

        Raises:
            FetchError: On network errors, error statuses or bad payloads
        """
        if not self.api_key:
            raise FetchError("No NewsAPI key configured (set NEWSAPI_KEY)")

        url = self.build_url(topics)
        logger.debug(f"Fetching articles for {build_query(topics)!r}")

        try:
            async with async_timeout.timeout(self.timeout):
                async with self.session.get(url) as response:
                    status = response.status
                    try:
                        body = await response.text()
                    except (UnicodeDecodeError, LookupError) as e:
                        raise FetchError(
                            f"Could not decode response body: {e}", status=status
                        ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"Error fetching {self.base_url}: {e}") from e

        if status >= 400:
            raise FetchError(
                f"Search request failed with status {status}: {self._error_message(body)}",
                status=status,
            )

        try:
            payload: Dict = json.loads(body)
        except ValueError as e:
            raise FetchError(f"Response is not valid JSON: {e}") from e

        articles = extract_articles(payload)
        logger.info(f"Fetched {len(articles)} articles")
        return articles

"""
Article data model for topicnews.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

@dataclass(frozen=True)
class Article:
    """
    A single search result. The URL identifies the article.
    """
    url: str
    title: str
    source_name: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    published_at: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> Optional["Article"]:
        """
        Build an Article from one entry of a search response.

        Args:
            item: Raw article object from the ``articles`` array

        Returns:
            The Article, or None if the entry has no usable URL
        """
        if not isinstance(item, dict):
            return None
        url = item.get('url')
        if not isinstance(url, str) or not url:
            return None

        source = item.get('source')
        source_name = source.get('name') if isinstance(source, dict) else None

        return cls(
            url=url,
            title=item.get('title') or "",
            source_name=source_name if isinstance(source_name, str) else None,
            description=item.get('description'),
            author=item.get('author'),
            published_at=item.get('publishedAt'),
            image_url=item.get('urlToImage'),
        )

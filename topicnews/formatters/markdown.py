"""
Markdown formatting utilities for topicnews.
"""
import logging
import re
from datetime import datetime
from typing import List, Optional

from bs4 import BeautifulSoup

from topicnews.core.article import Article

# Configure logging
logger = logging.getLogger(__name__)

MARKDOWN_SPECIAL = re.compile(r'[\\`*_\[\]<>#|!]')

LINK_TARGET_ESCAPES = {
    ' ': '%20',
    '(': '%28',
    ')': '%29',
    '<': '%3C',
    '>': '%3E',
}

class MarkdownFormatter:
    """
    Formats the preference chips and article list as Markdown.
    """
    def __init__(self):
        self.today = datetime.now().strftime("%B %d, %Y")

    @staticmethod
    def _clean_text(text: Optional[str]) -> str:
        """
        Strip HTML markup and collapse whitespace.

        Args:
            text: Raw text from the search API

        Returns:
            Plain text, empty string for None
        """
        if not text:
            return ""
        if '<' in text or '&' in text:
            text = BeautifulSoup(text, 'html.parser').get_text()
        return " ".join(text.split())

    def format_preferences(self, preferences: List[str]) -> str:
        """
        Render topics as a single row of chips.

        Args:
            preferences: Current preference list, in display order

        Returns:
            The chip row, or a hint when there are no topics
        """
        if not preferences:
            return "_No topics yet. Add one to see news._"
        return " ".join(self._code_span(f"[ {topic} ]") for topic in preferences)

    @staticmethod
    def _code_span(text: str) -> str:
        """
        Wrap text in a code span whose fence is longer than any backtick run inside.
        """
        runs = re.findall(r'`+', text)
        fence = '`' * (max((len(r) for r in runs), default=0) + 1)
        if runs:
            return f"{fence} {text} {fence}"
        return f"{fence}{text}{fence}"

    @staticmethod
    def _escape(text: str) -> str:
        """Backslash-escape Markdown punctuation in inline text."""
        return MARKDOWN_SPECIAL.sub(r'\\\g<0>', text)

    @staticmethod
    def _link_target(url: str) -> str:
        """Percent-encode the characters that would end a link destination."""
        for char, encoded in LINK_TARGET_ESCAPES.items():
            url = url.replace(char, encoded)
        return url

    def format_article(self, article: Article) -> str:
        """
        Render one article as a list item: linked title, then source name.
        """
        title = self._escape(self._clean_text(article.title) or article.url)
        line = f"- **[{title}]({self._link_target(article.url)})**"
        source = self._escape(self._clean_text(article.source_name))
        if source:
            line += f"  \n  {source}"
        return line

    def format_articles(self, articles: List[Article]) -> str:
        """
        Render the article list. Repeated URLs are shown once.

        Args:
            articles: Current article list

        Returns:
            Markdown list of articles
        """
        if not articles:
            return "_No articles to show._"

        seen = set()
        lines = []
        for article in articles:
            if article.url in seen:
                logger.debug(f"Skipping repeated article {article.url}")
                continue
            seen.add(article.url)
            lines.append(self.format_article(article))
        return "\n".join(lines)

    def format_page(self, title: str, preferences: List[str], articles: List[Article]) -> str:
        """
        Render the whole screen: header, topic chips and articles.

        Args:
            title: Page heading
            preferences: Current preference list
            articles: Current article list

        Returns:
            Markdown document
        """
        return "\n".join([
            f"# {title}",
            "",
            f"_{self.today}_",
            "",
            "## Topics",
            "",
            self.format_preferences(preferences),
            "",
            "## Articles",
            "",
            self.format_articles(articles),
            "",
        ])

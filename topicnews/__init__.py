"""
topicnews - Topic-driven News Reader

Keeps a list of preferred news topics and shows the latest articles
matching them, fetched from a NewsAPI-compatible search endpoint.
"""

__version__ = "0.1.0"

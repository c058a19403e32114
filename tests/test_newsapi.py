"""Unit tests for the NewsAPI fetcher."""

import asyncio
import json
import unittest
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import aiohttp

from topicnews.core.article import Article
from topicnews.errors import FetchError
from topicnews.fetchers.newsapi import NewsApiFetcher, build_query, extract_articles


class FakeResponse:
    def __init__(self, status=200, body="", text_error=None):
        self.status = status
        self.body = body
        self.text_error = text_error

    async def text(self):
        if self.text_error is not None:
            raise self.text_error
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession; replays canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.urls = []

    def get(self, url):
        self.urls.append(url)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_fetcher(*responses, **kwargs):
    session = FakeSession(*responses)
    fetcher = NewsApiFetcher(
        api_key=kwargs.pop("api_key", "test-key"),
        base_url="https://newsapi.example/v2/everything",
        session=session,
        **kwargs,
    )
    return fetcher, session


class TestBuildQuery(unittest.TestCase):
    def test_single_topic(self):
        self.assertEqual(build_query(["ai"]), "ai")

    def test_topics_joined_with_or(self):
        self.assertEqual(build_query(["ai", "climate"]), "ai OR climate")

    def test_repeated_topics_kept(self):
        self.assertEqual(build_query(["ai", "ai"]), "ai OR ai")


class TestBuildUrl(unittest.TestCase):
    def test_query_and_fixed_params(self):
        fetcher, _ = make_fetcher()
        url = fetcher.build_url(["ai", "climate"])
        parts = urlsplit(url)
        params = parse_qs(parts.query)

        self.assertEqual(f"{parts.scheme}://{parts.netloc}{parts.path}",
                         "https://newsapi.example/v2/everything")
        self.assertEqual(params["q"], ["ai OR climate"])
        self.assertEqual(params["language"], ["en"])
        self.assertEqual(params["sortBy"], ["publishedAt"])
        self.assertEqual(params["apiKey"], ["test-key"])
        self.assertIn("q=ai%20OR%20climate&", url)

    def test_special_characters_are_percent_encoded(self):
        fetcher, _ = make_fetcher()
        url = fetcher.build_url(["C++ & Rust", "Q&A"])
        self.assertIn("q=C%2B%2B%20%26%20Rust%20OR%20Q%26A&", url)
        self.assertEqual(parse_qs(urlsplit(url).query)["q"], ["C++ & Rust OR Q&A"])


class TestExtractArticles(unittest.TestCase):
    def test_null_articles_is_empty(self):
        self.assertEqual(extract_articles({"articles": None}), [])

    def test_missing_articles_is_empty(self):
        self.assertEqual(extract_articles({"status": "ok"}), [])

    def test_non_list_articles_is_empty(self):
        self.assertEqual(extract_articles({"articles": "nope"}), [])

    def test_entries_without_url_are_skipped(self):
        articles = extract_articles({"articles": [
            {"title": "no url"},
            "not an object",
            {"url": "http://ok", "title": "OK"},
        ]})
        self.assertEqual(articles, [Article(url="http://ok", title="OK")])

    def test_missing_source_name(self):
        articles = extract_articles({"articles": [
            {"url": "http://a", "title": "A", "source": None},
            {"url": "http://b", "title": "B", "source": {"id": "b"}},
        ]})
        self.assertIsNone(articles[0].source_name)
        self.assertIsNone(articles[1].source_name)

    def test_non_object_payload_raises(self):
        with self.assertRaises(FetchError):
            extract_articles(["articles"])


class TestFetchArticles(unittest.IsolatedAsyncioTestCase):
    async def test_single_topic_response(self):
        body = json.dumps({"articles": [
            {"url": "http://x", "title": "T", "source": {"name": "S"}}
        ]})
        fetcher, session = make_fetcher(FakeResponse(200, body))

        articles = await fetcher.fetch_articles(["ai"])

        self.assertEqual(articles, [Article(url="http://x", title="T", source_name="S")])
        self.assertEqual(len(session.urls), 1)
        self.assertEqual(parse_qs(urlsplit(session.urls[0]).query)["q"], ["ai"])

    async def test_extra_fields_are_carried(self):
        body = json.dumps({"articles": [{
            "url": "http://x",
            "title": "T",
            "description": "D",
            "author": "A",
            "publishedAt": "2024-01-01T00:00:00Z",
            "urlToImage": "http://x/img.png",
        }]})
        fetcher, _ = make_fetcher(FakeResponse(200, body))

        article = (await fetcher.fetch_articles(["ai"]))[0]

        self.assertEqual(article.description, "D")
        self.assertEqual(article.author, "A")
        self.assertEqual(article.published_at, "2024-01-01T00:00:00Z")
        self.assertEqual(article.image_url, "http://x/img.png")

    async def test_null_articles_returns_empty(self):
        fetcher, _ = make_fetcher(FakeResponse(200, '{"articles": null}'))
        self.assertEqual(await fetcher.fetch_articles(["ai"]), [])

    async def test_error_status_raises_with_message(self):
        body = json.dumps({"status": "error", "code": "apiKeyInvalid",
                           "message": "Your API key is invalid"})
        fetcher, _ = make_fetcher(FakeResponse(401, body))

        with self.assertRaises(FetchError) as ctx:
            await fetcher.fetch_articles(["ai"])

        self.assertEqual(ctx.exception.status, 401)
        self.assertIn("Your API key is invalid", str(ctx.exception))

    async def test_invalid_json_raises(self):
        fetcher, _ = make_fetcher(FakeResponse(200, "<html>oops</html>"))
        with self.assertRaises(FetchError):
            await fetcher.fetch_articles(["ai"])

    async def test_network_error_raises(self):
        fetcher, _ = make_fetcher(aiohttp.ClientConnectionError("refused"))
        with self.assertRaises(FetchError):
            await fetcher.fetch_articles(["ai"])

    async def test_undecodable_body_raises(self):
        error = UnicodeDecodeError("utf-8", b"\xff\xfe", 0, 1, "invalid start byte")
        fetcher, _ = make_fetcher(FakeResponse(200, text_error=error))

        with self.assertRaises(FetchError) as ctx:
            await fetcher.fetch_articles(["ai"])
        self.assertEqual(ctx.exception.status, 200)

    async def test_unknown_charset_raises(self):
        fetcher, _ = make_fetcher(FakeResponse(200, text_error=LookupError("unknown encoding: x-bogus")))
        with self.assertRaises(FetchError):
            await fetcher.fetch_articles(["ai"])

    async def test_timeout_raises(self):
        fetcher, _ = make_fetcher(asyncio.TimeoutError())
        with self.assertRaises(FetchError):
            await fetcher.fetch_articles(["ai"])

    @patch("topicnews.fetchers.newsapi.get_config", return_value=None)
    async def test_missing_api_key_raises_without_request(self, _mock_config):
        session = FakeSession()
        fetcher = NewsApiFetcher(base_url="https://newsapi.example", session=session)

        with self.assertRaises(FetchError):
            await fetcher.fetch_articles(["ai"])
        self.assertEqual(session.urls, [])

    async def test_injected_session_is_not_closed(self):
        fetcher, session = make_fetcher()
        await fetcher.close_session()
        self.assertIsNone(fetcher._session)


if __name__ == "__main__":
    unittest.main()

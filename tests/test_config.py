"""Unit tests for configuration loading."""

import json
import os
import tempfile
import unittest
from unittest.mock import patch

import yaml

from topicnews.config import Config


class TestConfig(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.env = patch.dict(os.environ, {}, clear=True)
        self.env.start()

    def tearDown(self):
        self.env.stop()
        self.tmp.cleanup()

    def write(self, name, text):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w") as f:
            f.write(text)
        return path

    def test_defaults(self):
        cfg = Config()
        self.assertEqual(cfg.get("newsapi.base_url"), "https://newsapi.org/v2/everything")
        self.assertEqual(cfg.get("newsapi.language"), "en")
        self.assertEqual(cfg.get("newsapi.sort_by"), "publishedAt")
        self.assertEqual(cfg.get("storage.key"), "preferences")
        self.assertIsNone(cfg.get("newsapi.api_key"))
        self.assertIsNone(cfg.get("newsapi.timeout_seconds"))
        self.assertFalse(cfg.get("feed.sequence_guard"))
        self.assertEqual(cfg.get("missing.key", "fallback"), "fallback")

    def test_yaml_file_is_merged(self):
        path = self.write("config.yaml", "newsapi:\n  language: de\nstorage:\n  path: /tmp/x.db\n")
        cfg = Config(path)
        self.assertEqual(cfg.get("newsapi.language"), "de")
        self.assertEqual(cfg.get("newsapi.sort_by"), "publishedAt")
        self.assertEqual(cfg.get("storage.path"), "/tmp/x.db")

    def test_json_file_is_merged(self):
        path = self.write("config.json", json.dumps({"feed": {"sequence_guard": True}}))
        self.assertTrue(Config(path).get("feed.sequence_guard"))

    def test_file_does_not_leak_into_defaults(self):
        path = self.write("config.json", json.dumps({"newsapi": {"language": "fr"}}))
        Config(path)
        self.assertEqual(Config().get("newsapi.language"), "en")

    def test_unsupported_format_falls_back_to_defaults(self):
        path = self.write("config.ini", "[newsapi]\nlanguage = de\n")
        with self.assertLogs("topicnews.config", level="ERROR"):
            cfg = Config(path)
        self.assertEqual(cfg.get("newsapi.language"), "en")

    def test_env_overrides_keys_with_underscores(self):
        os.environ["TOPICNEWS_NEWSAPI_SORT_BY"] = "relevancy"
        os.environ["TOPICNEWS_NEWSAPI_API_KEY"] = "from-env"
        os.environ["TOPICNEWS_FEED_SEQUENCE_GUARD"] = "true"
        os.environ["TOPICNEWS_NEWSAPI_TIMEOUT_SECONDS"] = "12.5"

        cfg = Config()

        self.assertEqual(cfg.get("newsapi.sort_by"), "relevancy")
        self.assertEqual(cfg.get("newsapi.api_key"), "from-env")
        self.assertIs(cfg.get("feed.sequence_guard"), True)
        self.assertEqual(cfg.get("newsapi.timeout_seconds"), 12.5)

    def test_newsapi_key_fallback(self):
        os.environ["NEWSAPI_KEY"] = "plain-env"
        self.assertEqual(Config().get("newsapi.api_key"), "plain-env")

    def test_set_and_save(self):
        cfg = Config()
        cfg.set("storage.path", "elsewhere.db")
        path = os.path.join(self.tmp.name, "saved.yaml")

        self.assertTrue(cfg.save(path))

        with open(path) as f:
            self.assertEqual(yaml.safe_load(f)["storage"]["path"], "elsewhere.db")
        self.assertEqual(Config(path).get("storage.path"), "elsewhere.db")

    def test_save_without_path_fails(self):
        with self.assertLogs("topicnews.config", level="ERROR"):
            self.assertFalse(Config().save())


if __name__ == "__main__":
    unittest.main()

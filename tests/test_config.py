"""Tests for Config loading and validation."""

import os
import unittest
from unittest.mock import patch

from utils.config import Config


class TestConfigFromEnvironment(unittest.TestCase):
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = Config()
        self.assertEqual(config.MONGODB_URI, "mongodb://localhost:27017")
        self.assertEqual(config.JWT_ALGORITHM, "HS256")
        self.assertEqual(config.JWT_ACCESS_TOKEN_EXPIRE_MINUTES, 60)
        self.assertEqual(config.MEDIA_MAX_FILES_PER_FIELD, 10)
        self.assertEqual(config.MEDIA_MAX_REQUEST_BYTES, 100 * 1024 * 1024)
        self.assertEqual(config.EVENT_UPDATE_POLICY, "append")
        self.assertEqual(config.CORS_ORIGINS, ["*"])
        self.assertEqual(config.PORT, 5000)

    def test_reads_environment(self) -> None:
        env = {
            "MONGODB_URI": "mongodb://db:27017",
            "JWT_SECRET_KEY": "abc",
            "EVENT_UPDATE_POLICY": "Replace",
            "CORS_ORIGINS": "http://a.test, http://b.test",
            "PORT": "8080",
        }
        with patch.dict(os.environ, env, clear=True):
            config = Config().validate()
        self.assertEqual(config.MONGODB_URI, "mongodb://db:27017")
        self.assertEqual(config.EVENT_UPDATE_POLICY, "replace")
        self.assertEqual(config.CORS_ORIGINS, ["http://a.test", "http://b.test"])
        self.assertEqual(config.PORT, 8080)

    def test_overrides_win_over_environment(self) -> None:
        with patch.dict(os.environ, {"MONGODB_DB": "from_env"}, clear=True):
            config = Config(MONGODB_DB="override")
        self.assertEqual(config.MONGODB_DB, "override")

    def test_unknown_override_is_rejected(self) -> None:
        with self.assertRaises(AttributeError):
            Config(NOT_A_SETTING=1)


class TestConfigValidation(unittest.TestCase):
    def test_missing_secret(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaisesRegex(RuntimeError, "JWT_SECRET_KEY"):
                Config().validate()

    def test_unknown_update_policy(self) -> None:
        with self.assertRaisesRegex(RuntimeError, "EVENT_UPDATE_POLICY"):
            Config(JWT_SECRET_KEY="abc", EVENT_UPDATE_POLICY="merge").validate()

    def test_empty_media_prefix(self) -> None:
        with self.assertRaisesRegex(RuntimeError, "MEDIA_URL_PREFIX"):
            Config(JWT_SECRET_KEY="abc", MEDIA_URL_PREFIX="/").validate()


if __name__ == "__main__":
    unittest.main()

"""Tests for configuration manager and settings."""
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from finwise.config import AppSettings, Config, ConfigManager, get_settings


class TestConfigManager(unittest.TestCase):
    """Test ConfigManager functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.config_manager = ConfigManager(config_dir=self.test_dir)
        env = {k: v for k, v in os.environ.items() if k not in ("GEMINI_API_KEY", "FINWISE_LLM_ENDPOINT")}
        self.env_patch = patch.dict(os.environ, env, clear=True)
        self.env_patch.start()

    def tearDown(self):
        """Clean up test fixtures."""
        self.env_patch.stop()
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_save_and_load_config(self):
        """Test saving and loading configuration."""
        config = Config(gemini_api_key="test_key", model_name="gemini-2.5-flash")

        self.config_manager.save_config(config)
        loaded_config = self.config_manager.load_config()

        self.assertEqual(loaded_config.gemini_api_key, "test_key")
        self.assertEqual(loaded_config.model_name, "gemini-2.5-flash")
        self.assertEqual(loaded_config.state_path, str(self.test_dir / "state.json"))

    def test_defaults_without_file(self):
        config = self.config_manager.load_config()
        self.assertIsNone(config.gemini_api_key)
        self.assertEqual(config.log_level, "INFO")

    def test_environment_overrides(self):
        self.config_manager.save_config(Config(gemini_api_key="from_file"))
        os.environ["GEMINI_API_KEY"] = "from_env"
        os.environ["FINWISE_LLM_ENDPOINT"] = "http://localhost:3000/api/gemini"

        config = self.config_manager.load_config()
        self.assertEqual(config.gemini_api_key, "from_env")
        self.assertEqual(config.llm_endpoint, "http://localhost:3000/api/gemini")

    def test_corrupted_file(self):
        self.config_manager.config_file.write_text("{not json", encoding="utf-8")
        with self.assertRaises(RuntimeError):
            self.config_manager.load_config()

    def test_validate_config_valid(self):
        """Test validation with valid config."""
        is_valid, _ = self.config_manager.validate_config(Config(gemini_api_key="test_key"))
        self.assertTrue(is_valid)

        is_valid, _ = self.config_manager.validate_config(Config(llm_endpoint="https://proxy.example/api"))
        self.assertTrue(is_valid)

    def test_validate_config_missing_key(self):
        """Test validation with missing API key and endpoint."""
        is_valid, message = self.config_manager.validate_config(Config(gemini_api_key=""))
        self.assertFalse(is_valid)
        self.assertIn("API key", message)

    def test_validate_config_bad_endpoint(self):
        is_valid, message = self.config_manager.validate_config(Config(llm_endpoint="ftp://proxy"))
        self.assertFalse(is_valid)
        self.assertIn("http", message)

    def test_validate_config_bad_log_level(self):
        is_valid, _ = self.config_manager.validate_config(Config(gemini_api_key="k", log_level="LOUD"))
        self.assertFalse(is_valid)


class TestAppSettings(unittest.TestCase):
    """Test loading of the bundled config.yaml."""

    def test_bundled_settings(self):
        settings = get_settings()

        self.assertEqual(settings.llm_model_name, "gemini-2.5-flash-lite")
        self.assertEqual(settings.llm_max_tokens, 2048)
        self.assertEqual(settings.file_text_limit, 2000)
        self.assertEqual(settings.insight_limit, 50)
        self.assertEqual(settings.allowed_extensions, ["pdf", "csv", "xlsx", "xls", "txt"])
        self.assertEqual(settings.max_file_size_mb, 10)

    def test_stage_params(self):
        settings = get_settings()

        self.assertEqual(settings.stage("parse").max_tokens, 4096)
        self.assertEqual(settings.stage("recommend").temperature, 0.3)
        fallback = settings.stage("unknown")
        self.assertEqual((fallback.max_tokens, fallback.temperature), (2048, 0.1))

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            AppSettings.load(Path(tempfile.gettempdir()) / "does-not-exist.yaml")


if __name__ == "__main__":
    unittest.main()

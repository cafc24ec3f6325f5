"""
Tests for runtime settings.

Run with: pytest tests/test_settings.py -v
"""

import logging

from config.settings import Settings


class TestFromEnv:
    """Test reading settings from an environment mapping."""

    def test_defaults(self):
        settings = Settings.from_env(env={})

        assert settings.typesense_host == "localhost"
        assert settings.typesense_port == 8108
        assert settings.typesense_collection == "products"
        assert settings.openai_api_key is None
        assert settings.llm_enabled is False
        assert settings.gsheets_spreadsheet_id is None
        assert settings.debug is False

    def test_values(self):
        settings = Settings.from_env(env={
            "TYPESENSE_HOST": "search.internal",
            "TYPESENSE_PORT": "443",
            "TYPESENSE_PROTOCOL": "https",
            "TYPESENSE_TIMEOUT_SECONDS": "5.5",
            "OPENAI_API_KEY": "sk-test",
            "OPENAI_SERVER_URL": "http://localhost:11434/v1",
            "LLM_MODEL": "llama3",
            "HISTORY_LOG_DIR": "/tmp/history",
            "GSHEETS_SPREADSHEET_ID": "sheet-123",
            "DEBUG": "true",
        })

        assert settings.typesense_host == "search.internal"
        assert settings.typesense_port == 443
        assert settings.typesense_protocol == "https"
        assert settings.typesense_timeout_seconds == 5.5
        assert settings.llm_enabled is True
        assert settings.openai_base_url == "http://localhost:11434/v1"
        assert settings.llm_model == "llama3"
        assert settings.history_log_dir == "/tmp/history"
        assert settings.gsheets_spreadsheet_id == "sheet-123"
        assert settings.debug is True

    def test_google_key_accepted(self):
        settings = Settings.from_env(env={"GOOGLE_API_KEY": "g-key"})
        assert settings.openai_api_key == "g-key"

    def test_openai_key_wins(self):
        settings = Settings.from_env(env={"OPENAI_API_KEY": "sk-test", "GOOGLE_API_KEY": "g-key"})
        assert settings.openai_api_key == "sk-test"

    def test_empty_values_use_defaults(self):
        settings = Settings.from_env(env={"TYPESENSE_HOST": "", "TYPESENSE_PORT": "", "OPENAI_API_KEY": ""})
        assert settings.typesense_host == "localhost"
        assert settings.typesense_port == 8108
        assert settings.openai_api_key is None

    def test_invalid_number_falls_back(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="shopbot"):
            settings = Settings.from_env(env={"TYPESENSE_PORT": "eighty", "TYPESENSE_TIMEOUT_SECONDS": "soon"})

        assert settings.typesense_port == 8108
        assert settings.typesense_timeout_seconds == 2.0
        events = [getattr(r, "event", None) for r in caplog.records]
        assert events.count("invalid_setting") == 2

    def test_debug_false_values(self):
        assert Settings.from_env(env={"DEBUG": "no"}).debug is False
        assert Settings.from_env(env={"DEBUG": "1"}).debug is True

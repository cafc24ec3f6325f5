"""
Runtime settings for the product search assistant.

Values come from the environment, after python-dotenv has loaded a
local .env file (existing environment variables win).
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from core.structured_logging import get_logger

# Module-level logger
_logger = get_logger("config.settings")


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        _logger.warning(
            f"Invalid integer for {name}: {raw!r}, using {default}",
            extra={"event": "invalid_setting"},
        )
        return default


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        _logger.warning(
            f"Invalid number for {name}: {raw!r}, using {default}",
            extra={"event": "invalid_setting"},
        )
        return default


def _get_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """
    Application settings.

    Attributes:
        typesense_host: Engine host
        typesense_port: Engine port
        typesense_protocol: http or https
        typesense_api_key: Engine API key
        typesense_collection: Product collection name
        typesense_timeout_seconds: Client connection timeout
        openai_api_key: Key for the OpenAI-compatible completion API
        openai_base_url: Base URL of the completion API (None = OpenAI)
        llm_model: Model name
        history_log_dir: Directory for search_history.csv
        gsheets_spreadsheet_id: Spreadsheet for history (None = disabled)
        log_dir: Directory for application logs
        debug: Verbose console logging
    """
    typesense_host: str = "localhost"
    typesense_port: int = 8108
    typesense_protocol: str = "http"
    typesense_api_key: str = "xyz123"
    typesense_collection: str = "products"
    typesense_timeout_seconds: float = 2.0
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    llm_model: str = "gemini-2.0-flash"
    history_log_dir: str = "logs"
    gsheets_spreadsheet_id: Optional[str] = None
    log_dir: str = "logs"
    debug: bool = False

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        load_env_file: bool = True,
    ) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read instead of os.environ (tests)
            load_env_file: Load .env into os.environ first

        Returns:
            Settings with defaults for anything unset or invalid
        """
        if env is None:
            if load_env_file:
                load_dotenv()
            env = os.environ

        return cls(
            typesense_host=env.get("TYPESENSE_HOST") or "localhost",
            typesense_port=_get_int(env, "TYPESENSE_PORT", 8108),
            typesense_protocol=env.get("TYPESENSE_PROTOCOL") or "http",
            typesense_api_key=env.get("TYPESENSE_API_KEY") or "xyz123",
            typesense_collection=env.get("TYPESENSE_COLLECTION") or "products",
            typesense_timeout_seconds=_get_float(env, "TYPESENSE_TIMEOUT_SECONDS", 2.0),
            openai_api_key=env.get("OPENAI_API_KEY") or env.get("GOOGLE_API_KEY") or None,
            openai_base_url=env.get("OPENAI_SERVER_URL") or None,
            llm_model=env.get("LLM_MODEL") or "gemini-2.0-flash",
            history_log_dir=env.get("HISTORY_LOG_DIR") or "logs",
            gsheets_spreadsheet_id=env.get("GSHEETS_SPREADSHEET_ID") or None,
            log_dir=env.get("LOG_DIR") or "logs",
            debug=_get_bool(env, "DEBUG"),
        )

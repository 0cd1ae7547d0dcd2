"""Runtime configuration: API credentials, LLM endpoint and state location."""
import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from .settings import get_settings


def get_home_dir() -> Path:
    """FinWise home directory (FINWISE_HOME, default ~/.finwise)."""
    return Path(os.getenv("FINWISE_HOME", str(Path.home() / ".finwise")))


@dataclass
class Config:
    """System configuration."""
    gemini_api_key: Optional[str] = None
    llm_endpoint: Optional[str] = None
    model_name: Optional[str] = None
    log_level: str = "INFO"
    state_path: Optional[str] = None


class ConfigManager:
    """Loads and saves the JSON configuration file, applying environment overrides."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or get_home_dir()
        self.config_file = self.config_dir / get_settings().config_file

    def load_config(self) -> Config:
        """Load configuration from file (if any) and the environment."""
        config = Config()

        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    config_dict = json.load(f)
                config = Config(**config_dict)
            except (OSError, ValueError, TypeError) as e:
                raise RuntimeError(f"Failed to load configuration: {e}")

        if os.getenv("GEMINI_API_KEY"):
            config.gemini_api_key = os.getenv("GEMINI_API_KEY")
        if os.getenv("FINWISE_LLM_ENDPOINT"):
            config.llm_endpoint = os.getenv("FINWISE_LLM_ENDPOINT")

        if not config.state_path:
            config.state_path = str(self.config_dir / get_settings().state_file)

        return config

    def save_config(self, config: Config) -> None:
        """Save configuration as JSON."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(asdict(config), f, indent=2)
        except OSError as e:
            raise RuntimeError(f"Failed to save configuration: {e}")

    def validate_config(self, config: Config) -> tuple[bool, str]:
        """Validate configuration values."""
        if not config.gemini_api_key and not config.llm_endpoint:
            return False, "Gemini API key or LLM proxy endpoint is required"

        if config.llm_endpoint and not config.llm_endpoint.startswith(("http://", "https://")):
            return False, "LLM endpoint must be an http(s) URL"

        if config.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return False, f"Unknown log level: {config.log_level}"

        return True, "Configuration is valid"

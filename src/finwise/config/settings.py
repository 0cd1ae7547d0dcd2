"""Application settings loader from YAML configuration."""
import yaml
from pathlib import Path
from typing import Dict, List, Optional
from dataclasses import dataclass


@dataclass
class StageParams:
    """Token and temperature settings for one agent call."""
    max_tokens: int
    temperature: float


@dataclass
class AppSettings:
    """Application-wide settings loaded from config.yaml."""

    # App info
    app_name: str
    app_version: str

    # Logging
    log_level: str
    log_max_file_size_mb: int
    log_backup_count: int

    # LLM
    llm_model_name: str
    llm_max_tokens: int
    llm_temperature: float
    llm_top_p: float
    llm_top_k: int
    llm_stages: Dict[str, StageParams]

    # Processing
    file_text_limit: int
    classify_transaction_limit: int
    analyze_transaction_limit: int
    reminder_transaction_limit: int
    chat_transaction_limit: int
    insight_limit: int
    history_months: int
    chunk_size: int

    # Uploads
    allowed_extensions: List[str]
    max_file_size_mb: int

    # Paths
    config_file: str
    state_file: str

    def stage(self, name: str) -> StageParams:
        """Return call parameters for an agent stage, falling back to LLM defaults."""
        return self.llm_stages.get(name, StageParams(self.llm_max_tokens, self.llm_temperature))

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AppSettings":
        """Load settings from YAML file."""
        if config_path is None:
            config_path = Path(__file__).parent / "config.yaml"

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        stages = {
            name: StageParams(
                max_tokens=int(params["max_tokens"]),
                temperature=float(params["temperature"])
            )
            for name, params in config["llm"].get("stages", {}).items()
        }

        return cls(
            app_name=config["app"]["name"],
            app_version=config["app"]["version"],
            log_level=config["logging"]["level"],
            log_max_file_size_mb=config["logging"]["max_file_size_mb"],
            log_backup_count=config["logging"]["backup_count"],
            llm_model_name=config["llm"]["model_name"],
            llm_max_tokens=config["llm"]["max_tokens"],
            llm_temperature=config["llm"]["temperature"],
            llm_top_p=config["llm"]["top_p"],
            llm_top_k=config["llm"]["top_k"],
            llm_stages=stages,
            file_text_limit=config["processing"]["file_text_limit"],
            classify_transaction_limit=config["processing"]["classify_transaction_limit"],
            analyze_transaction_limit=config["processing"]["analyze_transaction_limit"],
            reminder_transaction_limit=config["processing"]["reminder_transaction_limit"],
            chat_transaction_limit=config["processing"]["chat_transaction_limit"],
            insight_limit=config["processing"]["insight_limit"],
            history_months=config["processing"]["history_months"],
            chunk_size=config["processing"]["chunk_size"],
            allowed_extensions=[ext.lower() for ext in config["uploads"]["allowed_extensions"]],
            max_file_size_mb=config["uploads"]["max_file_size_mb"],
            config_file=config["paths"]["config_file"],
            state_file=config["paths"]["state_file"]
        )


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings.load()
    return _settings

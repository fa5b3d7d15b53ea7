"""Configuration management."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"

# Environment variable -> config field
ENV_OVERRIDES = {
    "GOOGLE_SHEET_ID": "spreadsheet_id",
    "GOOGLE_APPLICATION_CREDENTIALS": "credentials_file",
    "CORS_ORIGIN": "cors_origin",
    "PORT": "port",
    "TA_DASHBOARD_LOG_LEVEL": "log_level",
}


class Config(BaseModel):
    """Application configuration."""

    spreadsheet_id: Optional[str] = None
    credentials_file: Optional[str] = None
    token_file: str = str(Path(__file__).parent.parent / "config" / "sheets_token.json")
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 3001
    cors_origin: str = "http://localhost:5173"
    timezone_offset_hours: float = 8.0
    conversion_threshold: float = 30.0
    inactive_after_days: Optional[int] = Field(default=None, ge=0)
    sanitize_stages: bool = True
    hidden_when_empty: list[str] = Field(default_factory=lambda: ["Technical Assessment"])


_config: Optional[Config] = None


def _env_overrides() -> dict:
    overrides = {}
    for env_name, field in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            overrides[field] = value
    return overrides


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file, with environment overrides.

    A missing file is not an error: without a spreadsheet id the dashboard
    serves placeholder data.
    """
    global _config

    if _config is not None:
        return _config

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    data = {}
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

    data.update(_env_overrides())
    _config = Config(**data)
    return _config


def get_config() -> Config:
    """Get the loaded configuration."""
    if _config is None:
        return load_config()
    return _config


def reset_config() -> None:
    """Forget the loaded configuration so the next access reloads it."""
    global _config
    _config = None

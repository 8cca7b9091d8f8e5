"""Config loader — reads YAML, applies VOLTRA_* env var overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from voltra.config.schema import AppConfig

_TRUE_VALUES = {"1", "true", "yes", "on"}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults.

    Environment variable overrides:
        VOLTRA_DATABASE_URL       -> database.url
        VOLTRA_LOG_LEVEL          -> logging.level
        VOLTRA_LOG_FORMAT         -> logging.format
        VOLTRA_BINANCE_API_KEY    -> markets.binance.api_key
        VOLTRA_BINANCE_SECRET_KEY -> markets.binance.secret_key
        VOLTRA_TEST_MODE          -> test_mode
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    # Apply env var overrides
    db_url = os.environ.get("VOLTRA_DATABASE_URL")
    if db_url:
        data.setdefault("database", {})["url"] = db_url

    log_level = os.environ.get("VOLTRA_LOG_LEVEL")
    if log_level:
        data.setdefault("logging", {})["level"] = log_level

    log_format = os.environ.get("VOLTRA_LOG_FORMAT")
    if log_format:
        data.setdefault("logging", {})["format"] = log_format

    api_key = os.environ.get("VOLTRA_BINANCE_API_KEY")
    if api_key:
        data.setdefault("markets", {}).setdefault("binance", {})["api_key"] = api_key

    secret_key = os.environ.get("VOLTRA_BINANCE_SECRET_KEY")
    if secret_key:
        data.setdefault("markets", {}).setdefault("binance", {})["secret_key"] = secret_key

    test_mode = os.environ.get("VOLTRA_TEST_MODE")
    if test_mode:
        data["test_mode"] = test_mode.strip().lower() in _TRUE_VALUES

    return AppConfig.model_validate(data)

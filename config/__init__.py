"""Configuration module for the CRM Analytics service."""

import os
from pathlib import Path

import yaml

# Project root directory
ROOT_DIR = Path(__file__).parent.parent.absolute()

# Load configuration
CONFIG_PATH = Path(os.environ.get("CRM_CONFIG_PATH", ROOT_DIR / "config" / "config.yaml"))


def load_config(path: Path = None) -> dict:
    """Load configuration from YAML file."""
    with open(path or CONFIG_PATH, "r") as f:
        config = yaml.safe_load(f) or {}

    # Environment overrides
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        config.setdefault("database", {})["url"] = database_url

    backend = os.environ.get("CRM_STORAGE_BACKEND")
    if backend:
        config.setdefault("storage", {})["backend"] = backend

    api_url = os.environ.get("CRM_API_URL")
    if api_url:
        config.setdefault("dashboard", {})["api_url"] = api_url

    return config


def get_config() -> dict:
    """Get configuration dictionary."""
    return load_config()


# Export commonly used paths
DATA_DIR = ROOT_DIR / "data"
LOGS_DIR = ROOT_DIR / "logs"

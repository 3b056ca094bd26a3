import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "source": "gh",  # "gh" (GitHub CLI) or "api" (REST API via PyGithub)
    "repo": None,  # owner/name for the api source; None = detect from the git remote
    "remote": "origin",
    "refresh_interval": 15,  # minimum seconds between refetches of the PR
    "tick_interval": 0.075,  # seconds between frames
    "draft": True,
    "create": True,
}

SOURCES = ("gh", "api")


def load_config(config_path: str = ".prwatch.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prwatch.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    if config["source"] not in SOURCES:
        raise ValueError(f"Unknown source {config['source']!r}. Choose one of: {', '.join(SOURCES)}.")
    if float(config["refresh_interval"]) < 0 or float(config["tick_interval"]) <= 0:
        raise ValueError("refresh_interval must be >= 0 and tick_interval must be > 0.")

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config

import os
from pathlib import Path
from typing import Optional

import yaml

from adolens_core.models import DEPTHS, FOCUS_AREAS, ReviewSettings

PROVIDERS = ("gemini", "openai", "anthropic")

DEFAULT_FOCUS: dict = {
    "bugs": True,
    "security": True,
    "performance": True,
    "style": True,
    "naming": False,
    "docs": False,
    "tests": False,
}

DEFAULT_CONFIG: dict = {
    "provider": "gemini",
    "model": None,  # None = provider default (gemini-2.5-flash-lite for gemini)
    "review_depth": "standard",
    "focus": DEFAULT_FOCUS,
    "max_retries": 1,
    "wait_timeout": 10.0,  # seconds to wait for the diff view to render
    "request_timeout": 30.0,  # Azure DevOps REST calls
    "model_timeout": 120.0,  # review model call
    "store": "noop",  # noop | sqlite | json
    "store_path": None,
}

_API_KEY_ENV = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def load_config(config_path: str = ".adolens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .adolens.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "focus": dict(DEFAULT_FOCUS)}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        focus = file_config.pop("focus", None) or {}
        config.update(file_config)
        config["focus"].update({k: bool(v) for k, v in focus.items() if k in FOCUS_AREAS})

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["gemini_api_key"] = os.environ.get("GEMINI_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")

    return config


def api_key_env_var(provider: str) -> str:
    return _API_KEY_ENV.get(provider, "GEMINI_API_KEY")


def build_settings(config: dict) -> ReviewSettings:
    """Turn a loaded config dict into immutable ReviewSettings for one review pass."""
    provider = config.get("provider", "gemini")
    if provider not in PROVIDERS:
        raise ValueError(f"Unknown model provider: {provider!r}. Choose one of: {', '.join(PROVIDERS)}.")

    depth = config.get("review_depth", "standard")
    if depth not in DEPTHS:
        raise ValueError(f"Unknown review depth: {depth!r}. Choose one of: {', '.join(DEPTHS)}.")

    focus = config.get("focus") or {}
    return ReviewSettings(
        api_key=config.get(f"{provider}_api_key") or "",
        model_id=config.get("model") or "",
        depth=depth,
        focus_areas=frozenset(area for area in FOCUS_AREAS if focus.get(area)),
        provider=provider,
    )

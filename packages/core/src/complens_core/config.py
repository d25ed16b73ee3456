import os
from dataclasses import replace
from pathlib import Path
from typing import Optional

import yaml

from complens_core.rubric import DEFAULT_PROFILE, DirectoryRule, ReviewCriterion, ReviewProfile

DEFAULT_CONFIG: dict = {
    "provider": "anthropic",  # used when no provider is enabled in the store
    "model": None,  # None = the provider's default model
    "max_tokens": 2048,
    "github_timeout": 15,  # seconds, per repository probe
    "model_timeout": 120,  # seconds, per completion call
    "criteria_matching": "lenient",  # lenient | strict | by_name
    "rubric": None,  # None = built-in Convex rubric; set to a YAML path to override
    "store_path": ".complens.db",
    "reviewed_by": "AI",
    "max_workers": 4,
}

CRITERIA_MATCHING_MODES = ("lenient", "strict", "by_name")

_API_KEY_ENV = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


def load_config(config_path: str = ".complens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .complens.yml in the current directory
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

    if config["criteria_matching"] not in CRITERIA_MATCHING_MODES:
        raise ValueError(
            f"Unknown criteria_matching mode: {config['criteria_matching']!r}. "
            f"Choose one of {', '.join(CRITERIA_MATCHING_MODES)}."
        )

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    for provider, env_var in _API_KEY_ENV.items():
        config[f"{provider}_api_key"] = os.environ.get(env_var)

    return config


def load_profile(config: dict) -> ReviewProfile:
    """
    Load the review profile.

    If ``rubric`` is set in config, loads overrides from that YAML file
    (relative to cwd). Keys absent from the file keep their built-in values.
    """
    custom_path = config.get("rubric")
    if not custom_path:
        return DEFAULT_PROFILE

    p = Path(custom_path)
    if not p.exists():
        raise FileNotFoundError(f"Rubric file not found: {custom_path}")
    data = yaml.safe_load(p.read_text()) or {}

    overrides: dict = {}
    if "criteria" in data:
        criteria = tuple(
            ReviewCriterion(name=c["name"], check=c.get("check", ""), critical=bool(c.get("critical", False)))
            for c in data["criteria"] or []
        )
        if not criteria:
            raise ValueError(f"Rubric file {custom_path} defines no criteria.")
        overrides["criteria"] = criteria
    if "definition_file" in data:
        overrides["definition_file"] = data["definition_file"]
    if "candidate_paths" in data:
        overrides["candidate_paths"] = tuple(data["candidate_paths"])
    if "directories" in data:
        overrides["directory_rules"] = tuple(
            DirectoryRule(prefix=d.get("prefix", ""), dirs=tuple(d.get("dirs") or (None,)))
            for d in data["directories"]
        )
    if "source_extensions" in data:
        overrides["source_extensions"] = tuple(data["source_extensions"])
    if "docs" in data:
        overrides["docs"] = tuple((d["title"], d["url"]) for d in data["docs"])

    return replace(DEFAULT_PROFILE, **overrides)


def api_key_env_var(provider: str) -> str:
    return _API_KEY_ENV[provider]


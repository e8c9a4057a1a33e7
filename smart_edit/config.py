"""
Configuration — loads settings from .smart_edit.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "sandbox_root": None,           # None means the current working directory
    "default_match_mode": "smart",
    "token_overlap_threshold": 0.8,
    "token_overlap_min_tokens": 3,
    "patch_search_window": 40,
    "context_lines": 5,
    "validate_syntax": True,
    "reject_syntax_errors": False,
    "metrics_enabled": True,
    "metrics_dir": ".smart_edit/metrics",
    "log_dir": ".smart_edit/logs",
    "log_level": "INFO",
}

# Config file search locations
_CONFIG_FILENAMES = [".smart_edit.yaml", ".smart_edit.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .smart_edit.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return _DEFAULTS[yaml_key]

        def _get_bool(env_key: str, yaml_key: str) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() in ("1", "true", "yes")
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return _DEFAULTS[yaml_key]

        root = _get("SMART_EDIT_SANDBOX_ROOT", "sandbox_root")
        self.SANDBOX_ROOT = os.path.abspath(os.path.expanduser(root or os.getcwd()))

        self.DEFAULT_MATCH_MODE = _get("SMART_EDIT_MATCH_MODE", "default_match_mode")

        self.TOKEN_OVERLAP_THRESHOLD = _get("SMART_EDIT_TOKEN_OVERLAP",
                                            "token_overlap_threshold", cast=float)
        self.TOKEN_OVERLAP_MIN_TOKENS = _get("SMART_EDIT_MIN_TOKENS",
                                             "token_overlap_min_tokens", cast=int)
        self.PATCH_SEARCH_WINDOW = _get("SMART_EDIT_PATCH_WINDOW",
                                        "patch_search_window", cast=int)
        self.CONTEXT_LINES = _get("SMART_EDIT_CONTEXT_LINES", "context_lines", cast=int)

        self.VALIDATE_SYNTAX = _get_bool("SMART_EDIT_VALIDATE_SYNTAX", "validate_syntax")
        self.REJECT_SYNTAX_ERRORS = _get_bool("SMART_EDIT_REJECT_SYNTAX_ERRORS",
                                              "reject_syntax_errors")

        self.METRICS_ENABLED = _get_bool("SMART_EDIT_METRICS", "metrics_enabled")
        self.METRICS_DIR = _get("SMART_EDIT_METRICS_DIR", "metrics_dir")

        self.LOG_DIR = _get("SMART_EDIT_LOG_DIR", "log_dir")
        self.LOG_LEVEL = _get("SMART_EDIT_LOG_LEVEL", "log_level").upper()

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)

import os
from pathlib import Path


APP_DIR_NAME = "loopback-redirect"
LOCAL_CONFIG_NAME = ".loopback_redirect.toml"


def get_xdg_config_home() -> Path:
    """Get the XDG config home directory, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")


def get_config_dir() -> Path:
    """Get the loopback-redirect configuration directory."""
    return get_xdg_config_home() / APP_DIR_NAME


def find_toml_config_file() -> Path | None:
    """Find the TOML configuration file for loopback_redirect.

    Searches in the following order:
    1. .loopback_redirect.toml in current directory
    2. config.toml in user config directory/loopback-redirect/
    """
    candidates = [
        Path(LOCAL_CONFIG_NAME).resolve(),
        get_config_dir() / "config.toml",
    ]

    for candidate in candidates:
        if candidate.exists() and candidate.is_file():
            return candidate

    return None

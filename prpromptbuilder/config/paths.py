# prpromptbuilder/config/paths.py

import os
import sys
from pathlib import Path
from typing import Optional

APP_NAME = "prpromptbuilder"
HOME_ENV_VAR = "PRPROMPTBUILDER_HOME"
CONFIG_FILE_NAME = "config.json"


def is_frozen() -> bool:
    """True when running from a PyInstaller-style bundle."""
    return bool(getattr(sys, "frozen", False))


def get_user_data_dir() -> Path:
    """
    Per-user directory for config and logs.

    PRPROMPTBUILDER_HOME wins; otherwise %APPDATA% on Windows and
    $XDG_CONFIG_HOME (or ~/.config) elsewhere.
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    if sys.platform == "win32" and os.environ.get("APPDATA"):
        return Path(os.environ["APPDATA"]) / APP_NAME
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_NAME


def get_user_config_file() -> Path:
    return get_user_data_dir() / CONFIG_FILE_NAME


def get_user_log_dir() -> Path:
    log_dir = get_user_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def get_bundled_config_path() -> Optional[Path]:
    """Default config shipped next to the package (or inside a frozen bundle)."""
    if is_frozen():
        base = Path(getattr(sys, "_MEIPASS", Path(sys.executable).parent))
    else:
        base = Path(__file__).resolve().parent
    candidate = base / "default_config.json"
    return candidate if candidate.exists() else None

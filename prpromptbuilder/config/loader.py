# prpromptbuilder/config/loader.py
import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Dict, Any, Tuple

from pydantic import ValidationError
from loguru import logger

from .schema import AppConfig, DEFAULT_PROMPT_TEMPLATES, PROMPT_MODES
from .paths import get_user_config_file, get_bundled_config_path

# Single-template key used before per-mode templates existed
LEGACY_BASE_PROMPT_KEY = "base_prompt"

_cached_config: Optional[AppConfig] = None


def _merge_templates(loaded_data: Dict[str, Any]) -> Tuple[Dict[str, str], bool]:
    """
    Completes the stored templates with the built-in defaults.

    - Adds templates for modes that have none stored.
    - Moves a legacy `base_prompt` value into `implement` if `implement` is unset.
    - Never overwrites a template the user has stored.

    Returns:
        A tuple containing:
        - The merged mode -> template dictionary.
        - A boolean indicating if any changes were made.
    """
    was_updated = False
    stored = loaded_data.get("prompt_templates")
    if stored is None:
        stored = {}
    elif not isinstance(stored, dict):
        logger.warning("Stored prompt templates are not a dictionary, using defaults.")
        stored = {}
        was_updated = True

    merged = {k: v for k, v in stored.items() if isinstance(v, str)}
    if len(merged) != len(stored):
        logger.warning("Dropped non-text prompt template entries.")
        was_updated = True

    legacy = loaded_data.pop(LEGACY_BASE_PROMPT_KEY, None)
    if legacy is not None:
        was_updated = True
        if "implement" not in merged and isinstance(legacy, str):
            logger.info("Migrating legacy base prompt into the 'implement' template.")
            merged["implement"] = legacy

    for mode in PROMPT_MODES:
        if mode not in merged:
            logger.info(f"Adding missing default template for mode '{mode}'.")
            merged[mode] = DEFAULT_PROMPT_TEMPLATES[mode]
            was_updated = True

    return merged, was_updated


def _read_json_object(path: Path) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise json.JSONDecodeError("Config root is not an object", "", 0)
    return data


def load_config() -> AppConfig:
    """
    Loads the application configuration, handling potential corruption
    and filling in default templates if necessary.
    """
    global _cached_config
    if _cached_config:
        return _cached_config

    config_path = get_user_config_file()
    loaded_data: Dict[str, Any] = {}
    config_source = "defaults"

    if config_path.exists():
        logger.info(f"Loading user configuration from: {config_path}")
        try:
            loaded_data = _read_json_object(config_path)
            config_source = "user file"
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to load or parse user config file {config_path}: {e}")
            try:
                backup_path = config_path.with_suffix(".json.corrupted")
                if backup_path.exists():
                    backup_path.unlink(missing_ok=True)
                config_path.rename(backup_path)
                logger.info(f"Backed up corrupted config to: {backup_path}")
            except OSError as backup_err:
                logger.error(f"Failed to backup corrupted config: {backup_err}")
            loaded_data = {}
            config_source = "defaults (user file corrupt)"
    else:
        bundled_path = get_bundled_config_path()
        if bundled_path:
            logger.info(f"Loading bundled configuration from: {bundled_path}")
            try:
                loaded_data = _read_json_object(bundled_path)
                config_source = "bundled file"
            except (json.JSONDecodeError, OSError) as e:
                logger.error(f"Failed to load or parse bundled config file {bundled_path}: {e}")
                loaded_data = {}
                config_source = "defaults (bundled file error)"
        else:
            logger.info("No user or bundled config found. Using default settings.")
            config_source = "defaults (no file found)"

    merged_templates, templates_were_updated = _merge_templates(loaded_data)
    loaded_data["prompt_templates"] = merged_templates

    try:
        config = AppConfig(**loaded_data)
    except ValidationError as e:
        logger.error(f"Configuration validation failed: {e}")
        logger.warning("Falling back to default configuration.")
        _cached_config = AppConfig()
        return _cached_config

    _cached_config = config
    logger.info(f"Configuration loaded successfully from: {config_source}")

    # Keep the user file in step with the running config
    if templates_were_updated or config_source != "user file":
        save_config(config)
    return config


def save_config(config: AppConfig) -> bool:
    """Saves the configuration using atomic write via NamedTemporaryFile."""
    config_path = get_user_config_file()
    logger.info(f"Saving configuration to: {config_path}")
    temp_file_path: Optional[Path] = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        # Temp file in the same directory so os.replace stays atomic
        with tempfile.NamedTemporaryFile(
            mode='w',
            encoding='utf-8',
            dir=config_path.parent,
            prefix=f".{config_path.name}_tmp",
            suffix=".json",
            delete=False
        ) as temp_f:
            temp_file_path = Path(temp_f.name)
            logger.debug(f"Writing config to temporary file: {temp_file_path}")
            temp_f.write(config.model_dump_json(indent=4))
            temp_f.flush()
            os.fsync(temp_f.fileno())

        os.replace(temp_file_path, config_path)
        temp_file_path = None
        logger.info("Configuration saved successfully.")
        return True
    except OSError as e:
        logger.error(f"Failed to save configuration to {config_path}: {e}")
        return False
    finally:
        if temp_file_path and temp_file_path.exists():
            logger.warning(f"Cleaning up leftover temporary config file: {temp_file_path}")
            try:
                temp_file_path.unlink()
            except OSError as unlink_err:
                logger.error(f"Failed to remove temporary config file {temp_file_path}: {unlink_err}")


def get_config() -> AppConfig:
    """Returns the cached configuration object, loading if necessary."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config_cache() -> None:
    global _cached_config
    _cached_config = None


def get_prompt_template(mode: str) -> str:
    return get_config().template_for(mode)


def set_prompt_template(mode: str, text: str) -> AppConfig:
    """Stores a user-edited template for `mode` and persists the config."""
    config = get_config()
    config.prompt_templates[mode] = text
    save_config(config)
    return config

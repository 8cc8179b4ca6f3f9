"""Configuration management for edfdecode."""

import codecs
import logging
import os
import tomllib

from pathlib import Path
from typing import Any

import tomli_w

from edfdecode.constants import (
    CONFIG_PATH_ENV_VAR,
    DEFAULT_APP_DIR,
    DEFAULT_CONFIG_FILE,
    DEFAULT_HEADER_ENCODING,
    DEFAULT_TAL_ENCODING,
)

logger = logging.getLogger(__name__)

ENCODING_KEYS = ("header_encoding", "tal_encoding")


def get_config_path() -> Path:
    """
    Get the path to the configuration file.

    Returns:
        Path from $EDFDECODE_CONFIG, or ~/.edfdecode/config.toml
    """
    override = os.environ.get(CONFIG_PATH_ENV_VAR)
    if override:
        return Path(override)
    return DEFAULT_APP_DIR / DEFAULT_CONFIG_FILE


def load_config() -> dict[str, Any]:
    """
    Load configuration from TOML file.

    Returns:
        Configuration dictionary. Returns empty dict if file doesn't exist
        or is corrupted.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return {}

    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.warning("Treating config as empty. Fix or delete the file to resolve.")
        return {}


def save_config(config: dict[str, Any]) -> None:
    """
    Save configuration to TOML file using atomic write.

    Creates the parent directory if it doesn't exist.
    Uses temp file + rename for atomic operation.

    Args:
        config: Configuration dictionary to save

    Raises:
        PermissionError: If directory cannot be created or file cannot be written
    """
    config_path = get_config_path()

    config_dir = config_path.parent
    try:
        os.makedirs(config_dir, exist_ok=True)
    except PermissionError as e:
        raise PermissionError(
            f"Cannot create config directory {config_dir}: {e}"
        ) from e

    temp_path = config_path.with_suffix(".toml.tmp")

    try:
        with open(temp_path, "wb") as f:
            tomli_w.dump(config, f)

        os.replace(temp_path, config_path)

    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


def get_decode_options() -> dict[str, str]:
    """
    Get decoder options from the [decode] table.

    Returns:
        Keyword arguments for decode_edf/read_edf

    Raises:
        ValueError: If a configured encoding is not a known codec
    """
    decode = load_config().get("decode", {})
    if not isinstance(decode, dict):
        decode = {}
    options = {
        "header_encoding": str(decode.get("header_encoding", DEFAULT_HEADER_ENCODING)),
        "tal_encoding": str(decode.get("tal_encoding", DEFAULT_TAL_ENCODING)),
    }
    for name, encoding in options.items():
        check_encoding(f"decode.{name}", encoding)
    return options


def check_encoding(key: str, value: Any) -> None:
    """Raise ValueError unless value names a codec Python knows."""
    try:
        codecs.lookup(str(value))
    except LookupError as e:
        raise ValueError(f"{key}: unknown encoding {value!r}") from e


def _split_key(key: str) -> tuple[str, str]:
    section, _, name = key.partition(".")
    if not section or not name:
        raise ValueError(f"Config key must look like 'section.name', got {key!r}")
    return section, name


def set_config_value(key: str, value: Any) -> None:
    """
    Set a dotted config key, e.g. ``decode.header_encoding``.

    Args:
        key: "section.name"
        value: Value to store

    Raises:
        ValueError: If the key is malformed or an encoding is unknown
    """
    section, name = _split_key(key)
    if section == "decode" and name in ENCODING_KEYS:
        check_encoding(key, value)
    config = load_config()

    if section not in config:
        config[section] = {}

    config[section][name] = value
    save_config(config)


def unset_config_value(key: str) -> bool:
    """
    Remove a dotted config key.

    If this was the only setting in its section, removes the section.
    If config becomes empty, deletes the config file.

    Returns:
        True if the key existed
    """
    section, name = _split_key(key)
    config = load_config()

    if section not in config or name not in config[section]:
        return False

    del config[section][name]

    if not config[section]:
        del config[section]

    if not config:
        config_path = get_config_path()
        if config_path.exists():
            config_path.unlink()
    else:
        save_config(config)
    return True

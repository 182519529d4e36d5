"""Where snowexplorer looks for connections.toml"""

import os
from importlib.resources import files as importlib_files
from pathlib import Path
from typing import Optional, Union

CONFIG_DIR_ENV = "SNOWEXPLORER_CONFIG_DIR"
CONNECTIONS_FILE = "connections.toml"


def get_config_dir() -> Path:
    """
    Directory holding connections.toml and test_config.toml.

    ``$SNOWEXPLORER_CONFIG_DIR`` when set, otherwise ``~/.snowexplorer``
    (the same dotfile convention as ``~/.snowsql``). Nothing is created here.
    """
    override = os.getenv(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return Path.home() / ".snowexplorer"


def example_config_path() -> Path:
    """The connections.toml.example shipped inside the package"""
    return Path(str(importlib_files("snowexplorer") / "_data" / f"{CONNECTIONS_FILE}.example"))


def get_default_config_path() -> Path:
    """connections.toml in the config directory; FileNotFoundError with setup steps if absent"""
    config_path = get_config_dir() / CONNECTIONS_FILE
    if config_path.exists():
        return config_path

    raise FileNotFoundError(
        f"No {CONNECTIONS_FILE} in {config_path.parent}.\n"
        f"Copy {example_config_path()} to {config_path} and fill in your account, "
        f"or point {CONFIG_DIR_ENV} at the directory that holds it."
    )


def resolve_config_path(path: Optional[Union[str, Path]] = None) -> Path:
    """``path`` as a Path when given, else the default connections file"""
    if path:
        return Path(path)
    return get_default_config_path()

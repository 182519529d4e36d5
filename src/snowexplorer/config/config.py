"""Read connection profiles out of connections.toml"""

import sys
from pathlib import Path
from typing import Dict, Union, Optional, Any

# tomllib is stdlib from 3.11
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .paths import example_config_path, resolve_config_path

PathLike = Optional[Union[str, Path]]


def _read_profiles(config_file: Path) -> Dict[str, Any]:
    with open(config_file, "rb") as f:
        return tomllib.load(f)


def load_profile(profile: str, path: PathLike = None) -> Dict[str, Any]:
    """
    Return the settings table of one profile as a fresh dict.

    ``path`` overrides the connections file; by default it is looked up in
    the snowexplorer config directory. The result feeds
    ``ConnectionCredentials.from_mapping``.

    Raises:
        FileNotFoundError: No connections file at the resolved path
        KeyError: The file has no table named ``profile``
    """
    config_file = resolve_config_path(path)

    if not config_file.exists():
        raise FileNotFoundError(
            f"Connections file {config_file} does not exist; start from {example_config_path()}"
        )

    profiles = _read_profiles(config_file)

    if profile not in profiles:
        defined = ", ".join(profiles) or "none"
        raise KeyError(f"Unknown connection profile '{profile}' in {config_file} (defined: {defined})")

    return dict(profiles[profile])


def list_profiles(path: PathLike = None) -> list[str]:
    """Profile names in file order; empty when the file is missing"""
    config_file = resolve_config_path(path)
    if not config_file.exists():
        return []
    return list(_read_profiles(config_file))

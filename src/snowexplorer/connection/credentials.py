"""Connection credentials and connect-option building"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

import keyring
from cryptography.hazmat.primitives import serialization
from pydantic import SecretStr

from snowexplorer.config import load_profile

PASSWORD_AUTH = "snowflake"
BROWSER_AUTH = "externalbrowser"
OAUTH_AUTH = "oauth"
KEYPAIR_AUTH = "snowflake_jwt"

# connections.toml keys that name a credential field differently
_PROFILE_ALIASES = {"user": "username"}
_SECRET_FIELDS = ("password", "token", "private_key_passphrase")


def _secret(value: Any) -> Optional[SecretStr]:
    if value is None or isinstance(value, SecretStr):
        return value
    return SecretStr(str(value))


@dataclass(frozen=True)
class ConnectionCredentials:
    """Everything needed to open a Snowflake connection

    ``options`` is passed to ``snowflake.connector.connect`` last, so its
    values override anything computed from the other fields.
    """

    account: str
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    token: Optional[SecretStr] = None
    database: Optional[str] = None
    warehouse: Optional[str] = None
    schema: Optional[str] = None
    role: Optional[str] = None
    authenticator: Optional[str] = None
    private_key_file: Optional[str] = None
    private_key_passphrase: Optional[SecretStr] = None
    private_key_passphrase_env: Optional[str] = None
    use_keyring: bool = False
    keyring_service: Optional[str] = None
    keyring_username: Optional[str] = None
    profile: Optional[str] = None
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Coerce secrets to SecretStr and freeze the options bag"""
        if not self.account:
            raise ValueError("ConnectionCredentials requires an 'account'")
        for name in _SECRET_FIELDS:
            object.__setattr__(self, name, _secret(getattr(self, name)))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @classmethod
    def from_mapping(
        cls, cfg: Mapping[str, Any], profile: Optional[str] = None
    ) -> "ConnectionCredentials":
        """Build credentials from a flat mapping such as a connections.toml profile

        Keys that are not credential fields are collected into ``options``
        and handed to the connector untouched.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        options: dict[str, Any] = {}

        for key, value in cfg.items():
            name = _PROFILE_ALIASES.get(key, key)
            if name == "options":
                continue
            if name in known:
                kwargs[name] = value
            else:
                options[key] = value

        options.update(cfg.get("options") or {})
        kwargs["options"] = options
        kwargs.setdefault("profile", profile)
        return cls(**kwargs)

    @classmethod
    def from_profile(
        cls, profile: str, path: Optional[str] = None, **overrides: Any
    ) -> "ConnectionCredentials":
        """Load credentials from a connections.toml profile with optional overrides"""
        cfg = load_profile(profile, path)
        cfg.update(overrides)
        return cls.from_mapping(cfg, profile=profile)

    @property
    def auth_mode(self) -> str:
        """Normalized authenticator name, defaulting to password auth"""
        return (self.authenticator or PASSWORD_AUTH).lower()

    @property
    def requires_browser(self) -> bool:
        """True when connecting waits on an interactive browser login"""
        mode = self.auth_mode
        return mode == BROWSER_AUTH or mode.startswith("https://")

    def connect_options(self) -> dict[str, Any]:
        """Keyword arguments for snowflake.connector.connect

        Base fields first, then authenticator-specific secrets, then the
        ``options`` bag (which wins on conflicts).
        """
        opts: dict[str, Any] = {"account": self.account}
        if self.username:
            opts["user"] = self.username
        for name in ("database", "warehouse", "schema", "role"):
            value = getattr(self, name)
            if value:
                opts[name] = value

        mode = self.auth_mode
        if mode == KEYPAIR_AUTH:
            opts["authenticator"] = "SNOWFLAKE_JWT"
            opts["private_key"] = self._load_private_key()
        elif mode == OAUTH_AUTH:
            if self.token is None:
                raise ValueError("OAuth authentication requires a 'token'")
            opts["authenticator"] = "oauth"
            opts["token"] = self.token.get_secret_value()
        elif mode == PASSWORD_AUTH:
            if self.password is not None:
                opts["password"] = self.password.get_secret_value()
        else:
            opts["authenticator"] = self.authenticator
            if self.password is not None:
                opts["password"] = self.password.get_secret_value()

        opts.update(self.options)
        return opts

    def _load_private_key(self) -> bytes:
        """Read and decrypt the PEM private key, returning DER (PKCS#8) bytes"""
        key_path, passphrase = self._get_key_details()

        try:
            with open(key_path, "rb") as key_file:
                p_key_bytes = key_file.read()

            private_key = serialization.load_pem_private_key(
                p_key_bytes,
                password=passphrase.get_secret_value().encode() if passphrase else None,
            )
        except Exception as e:
            raise IOError(f"Failed to read or decrypt private key from {key_path}: {e}") from e

        return private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def _get_key_details(self) -> tuple[Path, Optional[SecretStr]]:
        """Validate key path and resolve the passphrase from credentials, environment or keyring"""
        if not self.private_key_file:
            raise ValueError(
                "Keypair authentication requires 'private_key_file' in the credentials"
            )

        key_path = Path(self.private_key_file).expanduser()

        # Only allow absolute paths or home directory expansion
        if not key_path.is_absolute():
            raise ValueError(
                f"Private key path must be absolute or use ~ for home directory. Got: {self.private_key_file}"
            )

        if not key_path.exists():
            raise FileNotFoundError(f"Private key file not found: {key_path}")

        passphrase = self.private_key_passphrase

        if not passphrase and self.private_key_passphrase_env:
            env_pass = os.environ.get(self.private_key_passphrase_env)
            if env_pass:
                passphrase = SecretStr(env_pass)

        if not passphrase and self.use_keyring:
            service = self.keyring_service or f"snowexplorer.{self.profile or self.account}"
            keyring_username = self.keyring_username or self.username
            if not keyring_username:
                raise ValueError(
                    "Keyring usage requires 'user' in credentials or 'keyring_username'."
                )

            keyring_pass = keyring.get_password(service, keyring_username)
            if keyring_pass:
                passphrase = SecretStr(keyring_pass)

        return key_path, passphrase

    def __repr__(self) -> str:
        return (
            f"ConnectionCredentials(account={self.account!r}, user={self.username!r}, "
            f"database={self.database!r}, warehouse={self.warehouse!r}, "
            f"authenticator={self.auth_mode!r})"
        )

"""Configuration management for davsync.

Connection settings are read from environment variables first and then from
``~/.config/davsync/config``, a plain ``KEY=value`` file written by
``davsync init``.
"""

import os
from pathlib import Path
from typing import Optional

HOST_ENV = "DAVSYNC_HOST"
LOGIN_ENV = "DAVSYNC_LOGIN"
PASSWORD_ENV = "DAVSYNC_PASSWORD"
CONFIG_DIR_ENV = "DAVSYNC_CONFIG_DIR"


class Config:
    """Connection settings for the WebDAV endpoint."""

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = config_dir

    @property
    def config_dir(self) -> Path:
        if self._config_dir is not None:
            return self._config_dir
        env_dir = os.environ.get(CONFIG_DIR_ENV)
        if env_dir:
            return Path(env_dir)
        return Path.home() / ".config" / "davsync"

    def get_config_path(self) -> Path:
        """Get the path of the credentials file."""
        return self.config_dir / "config"

    def _read_file(self) -> dict[str, str]:
        path = self.get_config_path()
        if not path.exists():
            return {}

        values: dict[str, str] = {}
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                values[key.strip()] = value.strip()
        return values

    def _get(self, env_var: str) -> Optional[str]:
        value = os.environ.get(env_var)
        if value:
            return value
        return self._read_file().get(env_var)

    @property
    def host(self) -> Optional[str]:
        return self._get(HOST_ENV)

    @property
    def login(self) -> Optional[str]:
        return self._get(LOGIN_ENV)

    @property
    def password(self) -> Optional[str]:
        return self._get(PASSWORD_ENV)

    def is_configured(self) -> bool:
        """Check whether a host is available."""
        return bool(self.host)

    def save_credentials(self, host: str, login: str, password: str) -> None:
        """Write host, login and password to the config file.

        The file is created with owner-only permissions.
        """
        path = self.get_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        lines = [
            "# davsync configuration",
            f"{HOST_ENV}={host}",
            f"{LOGIN_ENV}={login}",
            f"{PASSWORD_ENV}={password}",
        ]
        with open(path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
        path.chmod(0o600)


config = Config()

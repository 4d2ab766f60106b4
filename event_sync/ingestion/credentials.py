"""Credential loading from configuration and the GitHub CLI's own store."""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Any, NamedTuple

import structlog
import yaml

from event_sync.exceptions import ConfigurationError
from event_sync.models.config import GitHubConfig

log = structlog.stdlib.get_logger()

GH_COMMAND = "gh"


class Credentials(NamedTuple):
    """GitHub login and API token for one run."""

    login: str
    token: str

    def __repr__(self) -> str:
        return f"Credentials(login={self.login!r}, token='***')"


def gh_hosts_path() -> Path:
    """Locate the gh CLI hosts file, honouring GH_CONFIG_DIR and XDG_CONFIG_HOME."""
    config_dir = os.getenv("GH_CONFIG_DIR")
    if config_dir:
        return Path(config_dir) / "hosts.yml"

    xdg_config_home = os.getenv("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home) / "gh" / "hosts.yml"

    return Path.home() / ".config" / "gh" / "hosts.yml"


class CredentialStore:
    """Resolves a (login, token) pair without touching the network.

    Values set in the configuration win; the gh hosts file fills in the rest;
    ``gh auth token`` is the last resort for the token, since recent gh
    releases keep it in the system keyring instead of hosts.yml.
    """

    def __init__(self, config: GitHubConfig, hosts_path: Path | None = None):
        """
        Initialize the credential store.

        Args:
            config: GitHub configuration (may carry login/token overrides)
            hosts_path: gh hosts file to read (default: gh's standard location)
        """
        self._config: GitHubConfig = config
        self._hosts_path: Path = hosts_path or gh_hosts_path()

    def load(self) -> Credentials:
        """
        Load credentials.

        Returns:
            Credentials with non-empty login and token

        Raises:
            ConfigurationError: If the login or token cannot be found
        """
        login = _clean(self._config.login)
        token = _clean(self._config.token)

        if not (login and token):
            host_entry = self._read_host_entry()
            login = login or _clean(host_entry.get("user"))
            token = token or _clean(host_entry.get("oauth_token"))

        if not token:
            token = self._token_from_helper()

        if not login:
            raise ConfigurationError(
                f"GitHub login not found. Set GHEVENTS_GITHUB__LOGIN or run "
                f"'gh auth login' (looked in {self._hosts_path})."
            )
        if not token:
            raise ConfigurationError(
                f"GitHub token not found for {self._config.host}. Set GHEVENTS_GITHUB__TOKEN "
                f"or run 'gh auth login'."
            )

        log.info("credentials_loaded", login=login, host=self._config.host)
        return Credentials(login=login, token=token)

    def _read_host_entry(self) -> dict[str, Any]:
        """Return the hosts.yml entry for the configured host, or an empty dict."""
        if not self._hosts_path.is_file():
            log.debug("gh_hosts_file_absent", path=str(self._hosts_path))
            return {}

        try:
            with open(self._hosts_path, "r", encoding="utf-8") as f:
                hosts = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {self._hosts_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read {self._hosts_path}: {e}") from e

        if hosts is None:
            return {}
        if not isinstance(hosts, dict):
            raise ConfigurationError(f"Unexpected structure in {self._hosts_path}")

        entry = hosts.get(self._config.host) or {}
        if not isinstance(entry, dict):
            raise ConfigurationError(
                f"Unexpected entry for {self._config.host} in {self._hosts_path}"
            )
        return entry

    def _token_from_helper(self) -> str | None:
        """Ask ``gh auth token`` for the token; None if gh is missing or fails."""
        executable = shutil.which(GH_COMMAND)
        if executable is None:
            return None

        try:
            result = subprocess.run(
                [executable, "auth", "token", "--hostname", self._config.host],
                capture_output=True,
                text=True,
                timeout=30,
                check=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            log.warning("gh_auth_token_failed", host=self._config.host, error=str(e))
            return None

        return _clean(result.stdout)


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None

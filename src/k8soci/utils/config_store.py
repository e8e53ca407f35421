"""
Settings for Git authentication, proxy registries and logging.

Values come from ``settings.json`` in the platform config directory, are
overridden by ``K8SOCI_*`` environment variables, and Git secrets fall back
to the system keyring.
"""

import os
import json
import platform
from pathlib import Path
from typing import Dict, Optional

import keyring
from keyring.errors import KeyringError

from k8soci.constants import (
    CONFIG_DIR_NAME,
    DEFAULT_GITHUB_API_URL,
    ENV_PREFIX,
    KEYRING_SERVICE,
)
from k8soci.exceptions import ConfigError

SECRET_NAMES = ("token", "password", "private_key")

# settings.json key -> environment variable suffix
GIT_SETTINGS = {
    "git_token": "GIT_TOKEN",
    "git_username": "GIT_USERNAME",
    "git_password": "GIT_PASSWORD",
    "git_author_name": "GIT_AUTHOR_NAME",
    "git_author_email": "GIT_AUTHOR_EMAIL",
    "github_app_id": "GITHUB_APP_ID",
    "github_app_installation_id": "GITHUB_APP_INSTALLATION_ID",
    "github_app_private_key": "GITHUB_APP_PRIVATE_KEY",
    "github_app_private_key_path": "GITHUB_APP_PRIVATE_KEY_PATH",
    "github_api_url": "GITHUB_API_URL",
}

# settings key -> keyring username under KEYRING_SERVICE
KEYRING_FALLBACKS = {
    "git_token": "token",
    "git_password": "password",
    "github_app_private_key": "private_key",
}


def parse_proxy_map(value: str) -> Dict[str, str]:
    """
    Parse a proxy registry map from 'src=dst,src2=dst2' or a JSON object.

    Raises:
        ConfigError: If an entry is malformed
    """
    value = value.strip()
    if not value:
        return {}

    if value.startswith("{"):
        try:
            parsed = json.loads(value)
        except ValueError as e:
            raise ConfigError(f"Invalid proxy registry JSON: {e}")
        return _validate_proxy_map(parsed)

    proxy_map = {}
    for pair in value.split(","):
        if not pair.strip():
            continue
        source, sep, target = pair.partition("=")
        if not sep or not source.strip() or not target.strip():
            raise ConfigError(f"Invalid proxy registry entry '{pair}', expected source=proxy")
        proxy_map[source.strip()] = target.strip()
    return proxy_map


def _validate_proxy_map(value) -> Dict[str, str]:
    if not isinstance(value, dict) or not all(
        isinstance(k, str) and isinstance(v, str) and k and v for k, v in value.items()
    ):
        raise ConfigError("Proxy registries must map registry hosts to proxy hosts")
    return dict(value)


class ConfigStore:
    def __init__(self):
        self.base_dir = self._get_config_dir()
        self.settings_file = self.base_dir / "settings.json"

    def _get_config_dir(self) -> Path:
        """Get platform-specific config directory"""
        system = platform.system()
        if system == "Windows":
            base_dir = os.environ.get("APPDATA", "")
            return Path(base_dir) / CONFIG_DIR_NAME
        elif system == "Darwin":  # macOS
            return Path.home() / "Library" / "Application Support" / CONFIG_DIR_NAME
        else:  # Linux and others
            xdg_config = os.environ.get("XDG_CONFIG_HOME", "")
            if xdg_config:
                return Path(xdg_config) / CONFIG_DIR_NAME
            return Path.home() / f".{CONFIG_DIR_NAME}"

    def get_settings(self) -> Dict:
        """Read settings.json, empty if missing or unreadable"""
        if not self.settings_file.exists():
            return {}
        try:
            with open(self.settings_file, "r", encoding="utf-8") as f:
                settings = json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
        return settings if isinstance(settings, dict) else {}

    def save_settings(self, updates: Dict) -> None:
        """Merge updates into settings.json"""
        settings = self.get_settings()
        settings.update(updates)
        os.makedirs(self.base_dir, exist_ok=True)
        with open(self.settings_file, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=2)

    def store_git_secret(self, name: str, value: str) -> None:
        """Store a Git secret (token, password, private_key) in the system keyring"""
        if name not in SECRET_NAMES:
            raise ConfigError(f"Unknown Git secret '{name}'")
        keyring.set_password(KEYRING_SERVICE, name, value)

    def _keyring_secret(self, name: str) -> str:
        try:
            return keyring.get_password(KEYRING_SERVICE, name) or ""
        except KeyringError:
            # No usable keyring backend
            return ""

    def get_git_settings(self) -> Dict[str, str]:
        """
        Resolve Git settings: environment, then settings.json, then keyring.

        A private key path is read into github_app_private_key when no key
        content is configured.
        """
        settings = self.get_settings()
        resolved = {}
        for key, env_suffix in GIT_SETTINGS.items():
            value = os.environ.get(ENV_PREFIX + env_suffix) or settings.get(key) or ""
            if not value and key in KEYRING_FALLBACKS:
                value = self._keyring_secret(KEYRING_FALLBACKS[key])
            resolved[key] = str(value)

        key_path = resolved.pop("github_app_private_key_path")
        if not resolved["github_app_private_key"] and key_path:
            try:
                resolved["github_app_private_key"] = Path(key_path).expanduser().read_text(
                    encoding="utf-8"
                )
            except OSError as e:
                raise ConfigError(f"Cannot read GitHub App private key {key_path}: {e}")

        resolved["github_api_url"] = resolved["github_api_url"] or DEFAULT_GITHUB_API_URL
        return resolved

    def build_auth_chain(self):
        """Build the Git authentication chain from the resolved settings"""
        from k8soci.git.auth import GitAuthChain

        git = self.get_git_settings()
        return GitAuthChain.from_values(
            token=git["git_token"],
            username=git["git_username"],
            password=git["git_password"],
            github_app_id=git["github_app_id"],
            github_app_installation_id=git["github_app_installation_id"],
            github_app_private_key=git["github_app_private_key"],
            github_api_url=git["github_api_url"],
        )

    def get_proxy_registry_map(self) -> Dict[str, str]:
        """
        Proxy registry map from K8SOCI_PROXY_REGISTRIES or settings.json.

        Raises:
            ConfigError: If the configured map is malformed
        """
        env_value = os.environ.get(ENV_PREFIX + "PROXY_REGISTRIES")
        if env_value:
            return parse_proxy_map(env_value)
        configured = self.get_settings().get("proxy_registries")
        if not configured:
            return {}
        return _validate_proxy_map(configured)

    def get_log_level(self) -> Optional[str]:
        return self.get_settings().get("log_level")

"""
Data types shared by the image credential resolution modules.
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from k8soci.constants import (
    DOCKER_CONFIG_JSON_KEY,
    DOCKERCFG_KEY,
    SECRET_TYPE_DOCKER_CONFIG_JSON,
    SECRET_TYPE_DOCKERCFG,
)


class SecretFormat(Enum):
    """On-disk shape of a Docker credential payload"""

    MODERN = SECRET_TYPE_DOCKER_CONFIG_JSON
    LEGACY = SECRET_TYPE_DOCKERCFG

    @property
    def data_key(self) -> str:
        """Key holding the payload inside the secret's data map"""
        if self is SecretFormat.MODERN:
            return DOCKER_CONFIG_JSON_KEY
        return DOCKERCFG_KEY

    @classmethod
    def from_secret_type(cls, secret_type: str) -> Optional["SecretFormat"]:
        """Map a Kubernetes secret type to a format, None if unsupported"""
        for fmt in cls:
            if fmt.value == secret_type:
                return fmt
        return None


@dataclass(frozen=True)
class SecretRecord:
    """A pull secret as read from the cluster"""

    name: str
    format: Optional[SecretFormat]
    raw_payload: bytes
    secret_type: str = ""

    @classmethod
    def from_secret_data(
        cls, name: str, secret_type: str, data: Optional[Dict[str, str]]
    ) -> "SecretRecord":
        """
        Build a record from a secret's type and its base64-encoded data map.

        Unsupported types produce a record with no format and an empty payload.
        """
        fmt = SecretFormat.from_secret_type(secret_type)
        payload = b""
        if fmt is not None and data and data.get(fmt.data_key):
            payload = base64.b64decode(data[fmt.data_key])
        return cls(name=name, format=fmt, raw_payload=payload, secret_type=secret_type)


@dataclass(frozen=True)
class NormalizedAuth:
    """Credentials for one registry, keyed by server_address"""

    username: str = ""
    password: str = ""
    token: str = ""
    server_address: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "username": self.username,
            "password": self.password,
            "token": self.token,
            "serverAddress": self.server_address,
        }


@dataclass(frozen=True)
class RegistryImage:
    """A container image together with the pull secrets of its pod"""

    image_id: str
    image: str = ""
    pull_secrets: Tuple[SecretRecord, ...] = field(default_factory=tuple)

"""
Image reference parsing and registry key resolution.

Container runtimes report image IDs with a transport prefix, for example
``docker-pullable://nginx@sha256:...`` or ``containerd://...``. Only the part
after the last ``://`` is a reference in the form::

    [host[:port]/]repository[:tag][@algorithm:digest]
"""

import re
from dataclasses import dataclass
from typing import Optional

from k8soci.constants import (
    DEFAULT_AUTH_KEY,
    DEFAULT_REGISTRY,
    DOCKER_HUB_HOSTS,
    OFFICIAL_REPO_PREFIX,
)
from k8soci.exceptions import InvalidReferenceError

_PATH_COMPONENT = r"[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*"
_DOMAIN_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"

REPOSITORY_RE = re.compile(rf"^{_PATH_COMPONENT}(?:/{_PATH_COMPONENT})*$")
DOMAIN_RE = re.compile(rf"^{_DOMAIN_COMPONENT}(?:\.{_DOMAIN_COMPONENT})*(?::[0-9]+)?$")
TAG_RE = re.compile(r"^[\w][\w.-]{0,127}$")
DIGEST_RE = re.compile(r"^[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}$")


@dataclass(frozen=True)
class ImageReference:
    registry: str
    repository: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    @property
    def name(self) -> str:
        return f"{self.registry}/{self.repository}"

    def __str__(self) -> str:
        ref = self.name
        if self.tag:
            ref += f":{self.tag}"
        if self.digest:
            ref += f"@{self.digest}"
        return ref


def strip_transport(image_id: str) -> str:
    """Return the part of an image ID after its last '://'"""
    return image_id.split("://")[-1]


def _split_domain(name: str):
    first, sep, rest = name.partition("/")
    if sep and ("." in first or ":" in first or first == "localhost"):
        return first, rest
    return DEFAULT_REGISTRY, name


def parse_reference(image_id: str) -> ImageReference:
    """
    Parse an image ID into registry, repository, tag and digest.

    Raises:
        InvalidReferenceError: If the reference does not follow the image
            reference grammar
    """
    reference = strip_transport(image_id or "").strip()
    if not reference:
        raise InvalidReferenceError(f"Empty image reference: '{image_id}'")

    name, _, digest = reference.partition("@")
    if digest and not DIGEST_RE.match(digest):
        raise InvalidReferenceError(f"Invalid digest in image reference: '{image_id}'")

    tag = None
    # A ':' after the last '/' separates the tag, anything before is a port
    last_colon = name.rfind(":")
    if last_colon > name.rfind("/"):
        name, tag = name[:last_colon], name[last_colon + 1:]
        if not TAG_RE.match(tag):
            raise InvalidReferenceError(f"Invalid tag in image reference: '{image_id}'")

    registry, repository = _split_domain(name)
    if not DOMAIN_RE.match(registry):
        raise InvalidReferenceError(f"Invalid registry in image reference: '{image_id}'")
    if not REPOSITORY_RE.match(repository):
        raise InvalidReferenceError(f"Invalid repository in image reference: '{image_id}'")

    if registry == DEFAULT_REGISTRY and "/" not in repository:
        repository = OFFICIAL_REPO_PREFIX + repository

    return ImageReference(
        registry=registry, repository=repository, tag=tag, digest=digest or None
    )


def convert_to_hostname(address: str) -> str:
    """Strip scheme and path from a registry server address"""
    host = address
    if "://" in host:
        host = host.split("://", 1)[1]
    return host.split("/", 1)[0]


def is_docker_hub(address: str) -> bool:
    """Whether a host or server address names Docker Hub"""
    return convert_to_hostname(address).lower() in DOCKER_HUB_HOSTS


def registry_key(address: str) -> str:
    """
    Map a host or server address to the key used for auth lookups.

    Every Docker Hub alias maps to the default auth key, anything else to its
    bare hostname.
    """
    if is_docker_hub(address):
        return DEFAULT_AUTH_KEY
    return convert_to_hostname(address)


def canonical_host(image_id: str) -> str:
    """
    Return the registry key for an image ID.

    Raises:
        InvalidReferenceError: If the image ID cannot be parsed
    """
    return registry_key(parse_reference(image_id).registry)

"""
Resolution of registry credentials for container images.
"""

from typing import List, Mapping, Optional

from k8soci.exceptions import DecodeError, InvalidReferenceError
from k8soci.logging import get_logger
from k8soci.oci import decoder, proxy
from k8soci.oci.reference import canonical_host, registry_key
from k8soci.oci.types import NormalizedAuth, RegistryImage, SecretRecord

logger = get_logger("k8soci.oci.registry")


def _lookup(auths: Mapping[str, NormalizedAuth], key: str) -> Optional[NormalizedAuth]:
    if key in auths:
        return auths[key]
    # Entries keyed as "https://host/v2/", "docker.io" and similar
    for address, auth in auths.items():
        if registry_key(address) == key:
            return auth
    return None


def resolve_with_pull_secret(
    image: RegistryImage, pull_secret: SecretRecord
) -> Optional[NormalizedAuth]:
    """
    Resolve the credentials a single pull secret holds for an image.

    Returns:
        The matching entry, or None if the secret has none for the image's registry

    Raises:
        DecodeError: If the secret payload is malformed
        InvalidReferenceError: If the image ID cannot be parsed
    """
    auths = decoder.decode(pull_secret)
    key = canonical_host(image.image_id)
    auth = _lookup(auths, key)
    if auth is None:
        logger.debug(f"Secret {pull_secret.name} has no entry for registry {key}")
    return auth


def resolve(
    image: RegistryImage, proxy_map: Optional[Mapping[str, str]] = None
) -> List[NormalizedAuth]:
    """
    Resolve credentials from every pull secret of an image.

    Secrets that fail to decode, or images whose ID cannot be parsed, are
    logged and skipped. The result follows the order of image.pull_secrets,
    with each server address passed through the proxy map.
    """
    credentials = []
    for secret in image.pull_secrets:
        try:
            auth = resolve_with_pull_secret(image, secret)
        except (DecodeError, InvalidReferenceError) as e:
            logger.warning(
                f"image: {image.image_id}, reading authentication configuration "
                f"from secret {secret.name} failed: {e}"
            )
            continue

        if auth is not None:
            credentials.append(proxy.rewrite(auth, proxy_map))

    return credentials


def resolve_first(image: RegistryImage) -> Optional[NormalizedAuth]:
    """
    Resolve a single credential for an image.

    Kept for callers that handle one credential per image: returns the first
    successfully resolved entry, or None.
    """
    credentials = resolve(image)
    return credentials[0] if credentials else None

"""
Registry credential resolution for container images.
"""

from k8soci.oci.decoder import decode
from k8soci.oci.proxy import rewrite
from k8soci.oci.reference import ImageReference, canonical_host, parse_reference
from k8soci.oci.registry import resolve, resolve_first, resolve_with_pull_secret
from k8soci.oci.types import NormalizedAuth, RegistryImage, SecretFormat, SecretRecord

__all__ = [
    "ImageReference",
    "NormalizedAuth",
    "RegistryImage",
    "SecretFormat",
    "SecretRecord",
    "canonical_host",
    "decode",
    "parse_reference",
    "resolve",
    "resolve_first",
    "resolve_with_pull_secret",
    "rewrite",
]

"""
Decoding of Kubernetes pull secret payloads.

Two payload shapes exist. The modern ``.dockerconfigjson`` form wraps the
registry map in an ``auths`` key:

    {"auths": {"registry.example.com": {"auth": "dXNlcjpwYXNz"}}}

The legacy ``.dockercfg`` form is the registry map itself:

    {"registry.example.com": {"auth": "dXNlcjpwYXNz", "email": "me@example.com"}}

Older clients wrote an even earlier two-line text form for the legacy secret:

    auth = dXNlcjpwYXNz
    email = me@example.com

All of them normalize to a mapping of registry key -> NormalizedAuth.
"""

import base64
import json
from typing import Any, Dict, Mapping, Tuple

from k8soci.constants import DEFAULT_AUTH_KEY
from k8soci.exceptions import DecodeError
from k8soci.logging import get_logger
from k8soci.oci.types import NormalizedAuth, SecretFormat, SecretRecord

logger = get_logger("k8soci.oci.decoder")


def decode_auth(auth: str) -> Tuple[str, str]:
    """
    Decode a base64 ``user:password`` string.

    Line breaks inside the value are ignored, as docker does.

    Raises:
        DecodeError: If the value is not a base64 string or has no ':' separator
    """
    if not auth:
        return "", ""
    if not isinstance(auth, str):
        raise DecodeError(f"Invalid auth value: expected a string, got {type(auth).__name__}")

    auth = auth.replace("\r", "").replace("\n", "")
    try:
        # binascii.Error and UnicodeDecodeError are both ValueErrors
        decoded = base64.b64decode(auth, validate=True).decode("utf-8")
    except ValueError as e:
        raise DecodeError(f"Invalid auth value: {e}")

    username, sep, password = decoded.partition(":")
    if not sep:
        raise DecodeError("Invalid auth configuration: missing ':' separator")
    return username, password.strip("\x00")


def encode_auth(username: str, password: str) -> str:
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


def normalize_entry(server_address: str, entry: Any) -> NormalizedAuth:
    """Normalize one registry entry of either format"""
    if not isinstance(entry, dict):
        raise DecodeError(f"Auth entry for {server_address} is not an object")

    username = entry.get("username") or ""
    password = entry.get("password") or ""
    if entry.get("auth"):
        # The encoded pair wins over explicit fields, as in the docker client
        username, password = decode_auth(entry["auth"])

    return NormalizedAuth(
        username=username,
        password=password,
        token=entry.get("registrytoken") or entry.get("identitytoken") or "",
        server_address=server_address,
    )


def _normalize_map(auths: Any) -> Dict[str, NormalizedAuth]:
    if not isinstance(auths, dict):
        raise DecodeError("Registry auth map is not an object")
    return {address: normalize_entry(address, entry) for address, entry in auths.items()}


def _load_json(payload: bytes) -> Any:
    try:
        return json.loads(payload)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"Payload is not valid JSON: {e}")


def decode_modern(payload: bytes) -> Dict[str, NormalizedAuth]:
    """Decode a ``.dockerconfigjson`` payload"""
    config = _load_json(payload)
    if not isinstance(config, dict):
        raise DecodeError("Docker config payload is not an object")
    return _normalize_map(config.get("auths") or {})


def decode_legacy(payload: bytes) -> Dict[str, NormalizedAuth]:
    """Decode a ``.dockercfg`` payload, including the pre-JSON text form"""
    try:
        config = json.loads(payload)
    except (ValueError, UnicodeDecodeError):
        return _decode_legacy_text(payload)
    return _normalize_map(config)


def _decode_legacy_text(payload: bytes) -> Dict[str, NormalizedAuth]:
    lines = payload.decode("utf-8", errors="replace").split("\n")
    if len(lines) < 2:
        raise DecodeError("The legacy auth config is empty")

    parts = lines[0].split(" = ")
    if len(parts) != 2:
        raise DecodeError("Invalid legacy auth config")

    username, password = decode_auth(parts[1].strip())
    return {
        DEFAULT_AUTH_KEY: NormalizedAuth(
            username=username, password=password, server_address=DEFAULT_AUTH_KEY
        )
    }


_DECODERS = {
    SecretFormat.MODERN: decode_modern,
    SecretFormat.LEGACY: decode_legacy,
}


def decode(record: SecretRecord) -> Dict[str, NormalizedAuth]:
    """
    Decode a pull secret into a mapping of registry key -> NormalizedAuth.

    Records of an unsupported secret type decode to an empty mapping.

    Raises:
        DecodeError: If the payload does not match its declared format
    """
    if record.format is None:
        logger.warning(
            f"Invalid secret-type '{record.secret_type}' for pull secret "
            f"{record.name}, no credentials read"
        )
        return {}

    auths = _DECODERS[record.format](record.raw_payload)
    logger.debug(
        f"Decoded {len(auths)} registry entries from {record.format.name.lower()} "
        f"secret {record.name}"
    )
    return auths


def encode_modern(auths: Mapping[str, NormalizedAuth]) -> bytes:
    """Encode normalized entries as a ``.dockerconfigjson`` payload"""
    entries = {}
    for address, auth in auths.items():
        entry = {"auth": encode_auth(auth.username, auth.password)}
        if auth.token:
            entry["registrytoken"] = auth.token
        entries[address] = entry
    return json.dumps({"auths": entries}).encode("utf-8")

"""
Image pull credential commands.
"""

from pathlib import Path
from typing import List, Optional

import typer

from k8soci.exceptions import ConfigError, DecodeError, InvalidReferenceError, K8sOciError
from k8soci.logging import get_logger
from k8soci.oci import decoder, registry
from k8soci.oci.reference import parse_reference
from k8soci.oci.types import RegistryImage, SecretFormat, SecretRecord
from k8soci.utils.config_store import ConfigStore
from k8soci.utils.console import console, create_table, error, info, mask, success, warning

logger = get_logger("k8soci.commands.images")


def _read_record(path: Path, fmt: SecretFormat) -> SecretRecord:
    return SecretRecord(name=path.name, format=fmt, raw_payload=path.read_bytes(), secret_type=fmt.value)


def _masked(auth) -> dict:
    entry = auth.to_dict()
    entry["password"] = mask(entry["password"])
    entry["token"] = mask(entry["token"])
    return entry


def _credentials_table(title: str, credentials) -> None:
    table = create_table(title, ["Server", "Username", "Password", "Token"])
    for auth in credentials:
        table.add_row(auth.server_address, auth.username, mask(auth.password), mask(auth.token))
    console.print(table)


def decode_secret(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Pull secret payload file"),
    legacy: bool = typer.Option(False, "--legacy", help="Payload is a legacy .dockercfg"),
    as_json: bool = typer.Option(False, "--json", help="Print entries as JSON, secrets masked"),
    convert: Optional[Path] = typer.Option(
        None, "--convert", dir_okay=False, help="Write the entries as a .dockerconfigjson payload"
    ),
) -> None:
    """Decode a pull secret payload and list its registries"""
    fmt = SecretFormat.LEGACY if legacy else SecretFormat.MODERN
    try:
        auths = decoder.decode(_read_record(file, fmt))
    except DecodeError as e:
        error(f"Failed to decode {file}: {e}")
        raise typer.Exit(1)

    if not auths:
        warning("No registry credentials found")
        return

    if convert is not None:
        convert.write_bytes(decoder.encode_modern(auths))
        success(f"Wrote {len(auths)} registry entries to {convert}")

    if as_json:
        console.print_json(data=[_masked(auth) for auth in auths.values()])
    else:
        _credentials_table(f"Registries in {file.name}", auths.values())


def resolve_image(
    image: str = typer.Argument(..., help="Image reference, e.g. docker://nginx:latest"),
    secrets: List[Path] = typer.Option(
        [], "--secret", "-s", exists=True, dir_okay=False, help="Modern pull secret payload"
    ),
    legacy_secrets: List[Path] = typer.Option(
        [], "--legacy-secret", exists=True, dir_okay=False, help="Legacy pull secret payload"
    ),
) -> None:
    """Resolve registry credentials for an image from local pull secret payloads"""
    try:
        reference = parse_reference(image)
    except InvalidReferenceError as e:
        error(str(e))
        raise typer.Exit(1)

    records = [_read_record(p, SecretFormat.MODERN) for p in secrets]
    records += [_read_record(p, SecretFormat.LEGACY) for p in legacy_secrets]

    try:
        proxy_map = ConfigStore().get_proxy_registry_map()
    except ConfigError as e:
        error(str(e))
        raise typer.Exit(1)

    credentials = registry.resolve(
        RegistryImage(image_id=image, image=image, pull_secrets=tuple(records)), proxy_map
    )
    if not credentials:
        info(f"No credentials for {reference}, anonymous pull")
        return
    _credentials_table(f"Credentials for {reference}", credentials)


def image_credentials(
    namespace_selector: Optional[str] = typer.Option(
        None, "--namespace-selector", help="Label selector for namespaces"
    ),
    pod_selector: Optional[str] = typer.Option(
        None, "--pod-selector", help="Label selector for pods"
    ),
) -> None:
    """Show which running container images have pull credentials"""
    from k8soci.kubernetes.client import KubeClient

    try:
        proxy_map = ConfigStore().get_proxy_registry_map()
        client = KubeClient()
        namespaces = client.list_namespaces(namespace_selector or "")
        pod_infos = client.load_pod_infos(namespaces, pod_selector or "")
    except K8sOciError as e:
        error(str(e))
        raise typer.Exit(1)

    table = create_table("Container image credentials", ["Pod", "Container", "Image", "Registries"])
    for pod in pod_infos:
        for container in pod.containers:
            credentials = registry.resolve(container.image, proxy_map)
            table.add_row(
                f"{pod.pod_namespace}/{pod.pod_name}",
                container.name,
                container.image.image_id,
                ", ".join(c.server_address for c in credentials) or "-",
            )
    console.print(table)
    logger.info(f"Resolved image credentials for {len(pod_infos)} pods")

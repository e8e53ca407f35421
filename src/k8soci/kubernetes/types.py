"""
Pod and container descriptions built from the Kubernetes API.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from k8soci.oci.types import RegistryImage


@dataclass(frozen=True)
class ContainerInfo:
    image: RegistryImage
    name: str


@dataclass
class PodInfo:
    containers: List[ContainerInfo]
    pod_name: str
    pod_namespace: str
    annotations: Dict[str, str] = field(default_factory=dict)
    pull_secret_names: List[str] = field(default_factory=list)

"""
Kubernetes access for pods and their image pull secrets.
"""

from k8soci.kubernetes.types import ContainerInfo, PodInfo

__all__ = ["ContainerInfo", "PodInfo"]

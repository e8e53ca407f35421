"""
Read-only access to namespaces, pods and pull secrets.
"""

from typing import Iterator, List, Optional, Sequence, Tuple

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes import watch
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from k8soci.exceptions import KubernetesError
from k8soci.kubernetes.types import ContainerInfo, PodInfo
from k8soci.logging import get_logger
from k8soci.oci.reference import strip_transport
from k8soci.oci.types import RegistryImage, SecretRecord

logger = get_logger("k8soci.kubernetes.client")


def unescape(selector: str) -> str:
    """Remove backslashes and double quotes from a label selector"""
    return selector.replace("\\", "").replace('"', "")


def load_kube_config() -> None:
    """
    Load cluster configuration.

    Tries in-cluster config first, then falls back to local kubeconfig.

    Raises:
        KubernetesError: If neither is available
    """
    try:
        k8s_config.load_incluster_config()
    except ConfigException:
        try:
            k8s_config.load_kube_config()
        except (ConfigException, OSError) as e:
            raise KubernetesError(f"kubeconfig file could not be found: {e}")


def _selector_kwargs(label_selector: Optional[str]) -> dict:
    if label_selector:
        selector = unescape(label_selector)
        logger.debug(f"Applied labelSelector {selector}")
        return {"label_selector": selector}
    return {}


class KubeClient:
    """Thin wrapper over CoreV1Api for pods and their pull secrets"""

    def __init__(self, core_v1: Optional[k8s_client.CoreV1Api] = None):
        if core_v1 is None:
            load_kube_config()
            core_v1 = k8s_client.CoreV1Api()
        self.core_v1 = core_v1

    def list_namespaces(self, label_selector: str = "") -> list:
        try:
            result = self.core_v1.list_namespace(**_selector_kwargs(label_selector))
        except ApiException as e:
            raise KubernetesError(f"failed to list namespaces: {e}")
        return list(result.items)

    def list_pods(self, namespace: str, label_selector: str = "") -> list:
        try:
            result = self.core_v1.list_namespaced_pod(
                namespace, **_selector_kwargs(label_selector)
            )
        except ApiException as e:
            raise KubernetesError(f"failed to list pods: {e}")
        return list(result.items)

    def load_pod_infos(self, namespaces: Sequence, pod_label_selector: str = "") -> List[PodInfo]:
        """Describe the pods of every namespace, skipping namespaces that fail"""
        pod_infos = []

        for ns in namespaces:
            try:
                pods = self.list_pods(ns.metadata.name, pod_label_selector)
            except KubernetesError as e:
                logger.error(f"failed to list pods for namespace {ns.metadata.name}: {e}")
                continue

            for pod in pods:
                refs = pod.spec.image_pull_secrets or []
                pod_infos.append(PodInfo(
                    containers=self.extract_container_infos(pod),
                    pod_name=pod.metadata.name,
                    pod_namespace=pod.metadata.namespace,
                    annotations=dict(pod.metadata.annotations or {}),
                    pull_secret_names=[ref.name for ref in refs],
                ))

        return pod_infos

    def extract_container_infos(self, pod) -> List[ContainerInfo]:
        """Container, init container and ephemeral container images of a pod"""
        status = pod.status
        statuses = []
        statuses.extend(status.container_statuses or [])
        statuses.extend(status.init_container_statuses or [])
        statuses.extend(status.ephemeral_container_statuses or [])

        pull_secrets = tuple(
            self.load_secrets(pod.metadata.namespace, pod.spec.image_pull_secrets or [])
        )

        containers = []
        for c in statuses:
            if not c.image_id:
                continue
            containers.append(ContainerInfo(
                image=RegistryImage(
                    image_id=strip_transport(c.image_id),
                    image=c.image,
                    pull_secrets=pull_secrets,
                ),
                name=c.name,
            ))

        return containers

    def load_secrets(self, namespace: str, refs: Sequence) -> List[SecretRecord]:
        """Read the referenced pull secrets, skipping unreadable or unsupported ones"""
        records = []

        for ref in refs:
            try:
                secret = self.core_v1.read_namespaced_secret(ref.name, namespace)
            except ApiException as e:
                logger.error(f"Could not load secret {namespace}/{ref.name}: {e.reason}")
                continue

            record = SecretRecord.from_secret_data(
                secret.metadata.name, secret.type, secret.data
            )
            if record.format is None:
                logger.error(
                    f"invalid secret-type {secret.type} for pullSecret "
                    f"{namespace}/{secret.metadata.name}"
                )
                continue

            if record.raw_payload:
                records.append(record)

        return records

    def watch_pods(
        self, label_selector: str = "", timeout_seconds: Optional[int] = None
    ) -> Iterator[Tuple[str, object]]:
        """Yield (event type, pod) pairs for pods in all namespaces"""
        kwargs = _selector_kwargs(label_selector)
        if timeout_seconds is not None:
            kwargs["timeout_seconds"] = timeout_seconds

        w = watch.Watch()
        try:
            for event in w.stream(self.core_v1.list_pod_for_all_namespaces, **kwargs):
                yield event["type"], event["object"]
        except ApiException as e:
            raise KubernetesError(f"failed to watch pods: {e}")
        finally:
            w.stop()

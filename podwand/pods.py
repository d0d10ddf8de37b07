"""Reading pod state from the cluster."""

import json
import subprocess
from typing import Any

import httpx

from podwand.errors import (
    AuthError,
    ConnectivityError,
    KubectlError,
    NotFoundError,
    TargetNotFoundError,
)
from podwand.types import (
    ContainerSnapshot,
    EphemeralContainerStatus,
    PodRef,
    VolumeMount,
)
from podwand.ui import print_debug

STRATEGIC_MERGE_PATCH = "application/strategic-merge-patch+json"


def _raise_for_kubectl(result: subprocess.CompletedProcess[str], pod: PodRef):
    stderr = result.stderr.strip()
    if "NotFound" in stderr or "not found" in stderr:
        raise NotFoundError(
            f"Pod '{pod.name}' not found in namespace '{pod.namespace}'.\n"
            f"Tip: Check the pod exists with: kubectl get pods -n {pod.namespace}"
        )
    if "Unauthorized" in stderr or "Forbidden" in stderr:
        raise AuthError(f"Cluster rejected the current credentials: {stderr}")
    raise KubectlError(f"kubectl exited with code {result.returncode}: {stderr}")


def fetch_pod(pod: PodRef) -> dict[str, Any]:
    """Fetch the pod document with `kubectl get pod -o json`."""
    cmd = ["kubectl", "get", "pod", pod.name, "-n", pod.namespace, "-o", "json"]
    print_debug(f"Running: {' '.join(cmd)}")

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except FileNotFoundError:
        raise KubectlError("kubectl not found on PATH.")

    if result.returncode != 0:
        _raise_for_kubectl(result, pod)

    return json.loads(result.stdout)


def current_namespace() -> str:
    """Namespace of the active kubectl context, or "default" if it has none."""
    cmd = ["kubectl", "config", "view", "--minify", "-o", "jsonpath={..namespace}"]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except FileNotFoundError:
        return "default"
    return result.stdout.strip() or "default"


class ClusterAPI:
    """Minimal client for the pod endpoints behind `kubectl proxy`."""

    def __init__(self, base_url: str, timeout: float = 10.0, transport=None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @staticmethod
    def pod_path(pod: PodRef) -> str:
        return f"/api/v1/namespaces/{pod.namespace}/pods/{pod.name}"

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        print_debug(f"{method} {self.base_url}{path}")
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise ConnectivityError(
                f"Could not reach the API proxy at {self.base_url}: {e}"
            ) from e

    def get_pod(self, pod: PodRef) -> dict[str, Any]:
        response = self._request("GET", self.pod_path(pod))

        if response.status_code == 404:
            raise NotFoundError(
                f"Pod '{pod.name}' not found in namespace '{pod.namespace}'."
            )
        if response.status_code in (401, 403):
            raise AuthError(f"Cluster rejected the request: {error_detail(response)}")
        if response.status_code >= 400:
            raise KubectlError(
                f"HTTP {response.status_code} reading pod: {error_detail(response)}"
            )
        return response.json()

    def patch_ephemeral_containers(
        self, pod: PodRef, patch: dict[str, Any]
    ) -> httpx.Response:
        return self._request(
            "PATCH",
            f"{self.pod_path(pod)}/ephemeralcontainers",
            json=patch,
            headers={"Content-Type": STRATEGIC_MERGE_PATCH},
        )


def error_detail(response: httpx.Response) -> str:
    """Message of a Kubernetes Status body, or the raw body text."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return response.text.strip()


# ===== Parsing =====


def _find_container(doc: dict[str, Any], target: str) -> dict[str, Any]:
    for container in doc.get("spec", {}).get("containers", []):
        if container.get("name") == target:
            return container

    available = ", ".join(
        c.get("name", "?") for c in doc.get("spec", {}).get("containers", [])
    )
    pod_name = doc.get("metadata", {}).get("name", "?")
    raise TargetNotFoundError(
        f"Container '{target}' not found in pod '{pod_name}'. "
        f"Available containers: {available or 'none'}"
    )


def container_mounts(doc: dict[str, Any], target: str) -> list[VolumeMount]:
    """Volume mounts of the target container, without subPath mounts.

    Ephemeral containers sharing subPath mounts race with the target's mount
    setup in the container runtime, so those are never copied.
    """
    container = _find_container(doc, target)
    mounts = [VolumeMount.from_dict(m) for m in container.get("volumeMounts") or []]
    return [m for m in mounts if not m.has_sub_path]


def container_security_context(
    doc: dict[str, Any], target: str
) -> dict[str, Any] | None:
    container = _find_container(doc, target)
    return container.get("securityContext") or None


def snapshot_container(doc: dict[str, Any], target: str) -> ContainerSnapshot:
    return ContainerSnapshot(
        name=target,
        volume_mounts=container_mounts(doc, target),
        security_context=container_security_context(doc, target),
    )


def ephemeral_statuses(doc: dict[str, Any]) -> list[EphemeralContainerStatus]:
    statuses = doc.get("status", {}).get("ephemeralContainerStatuses") or []
    return [EphemeralContainerStatus.from_dict(s) for s in statuses]


def find_status(
    doc: dict[str, Any], name: str
) -> EphemeralContainerStatus | None:
    for status in ephemeral_statuses(doc):
        if status.name == name:
            return status
    return None


def container_names(doc: dict[str, Any]) -> set[str]:
    """Every container name in the pod, including init and ephemeral containers."""
    spec = doc.get("spec", {})
    names: set[str] = set()
    for key in ("containers", "initContainers", "ephemeralContainers"):
        names.update(c["name"] for c in spec.get(key) or [] if "name" in c)
    return names

"""Tests for pods module - pod reads and parsing."""

import copy
import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from podwand.errors import (
    AuthError,
    ConnectivityError,
    KubectlError,
    NotFoundError,
    TargetNotFoundError,
)
from podwand.pods import (
    ClusterAPI,
    container_mounts,
    container_names,
    container_security_context,
    current_namespace,
    ephemeral_statuses,
    fetch_pod,
    snapshot_container,
)
from podwand.types import ContainerState, PodRef, VolumeMount

POD = PodRef(namespace="shop", name="web-1")


class TestFetchPod:
    """Tests for fetch_pod - kubectl invocation and error mapping."""

    @patch("subprocess.run")
    def test_parses_kubectl_json(self, mock_run: MagicMock, pod_doc):
        mock_run.return_value = MagicMock(
            stdout=json.dumps(pod_doc), stderr="", returncode=0
        )

        doc = fetch_pod(POD)

        assert doc == pod_doc
        call_args = mock_run.call_args[0][0]
        assert call_args == [
            "kubectl",
            "get",
            "pod",
            "web-1",
            "-n",
            "shop",
            "-o",
            "json",
        ]

    @patch("subprocess.run")
    def test_not_found(self, mock_run: MagicMock):
        mock_run.return_value = MagicMock(
            stdout="",
            stderr='Error from server (NotFound): pods "web-1" not found',
            returncode=1,
        )

        with pytest.raises(NotFoundError, match="not found in namespace 'shop'"):
            fetch_pod(POD)

    @patch("subprocess.run")
    def test_unauthorized(self, mock_run: MagicMock):
        mock_run.return_value = MagicMock(
            stdout="",
            stderr="error: You must be logged in to the server (Unauthorized)",
            returncode=1,
        )

        with pytest.raises(AuthError):
            fetch_pod(POD)

    @patch("subprocess.run")
    def test_other_failure(self, mock_run: MagicMock):
        mock_run.return_value = MagicMock(
            stdout="", stderr="Unable to connect to the server", returncode=1
        )

        with pytest.raises(KubectlError, match="Unable to connect"):
            fetch_pod(POD)

    @patch("subprocess.run")
    def test_missing_kubectl(self, mock_run: MagicMock):
        mock_run.side_effect = FileNotFoundError("kubectl")

        with pytest.raises(KubectlError, match="not found on PATH"):
            fetch_pod(POD)


class TestCurrentNamespace:
    @patch("subprocess.run")
    def test_uses_context_namespace(self, mock_run: MagicMock):
        mock_run.return_value = MagicMock(stdout="shop", returncode=0)

        assert current_namespace() == "shop"

    @patch("subprocess.run")
    def test_falls_back_to_default(self, mock_run: MagicMock):
        mock_run.return_value = MagicMock(stdout="", returncode=0)

        assert current_namespace() == "default"


class TestContainerMounts:
    """Tests for container_mounts - subPath filtering."""

    def test_excludes_sub_path_mounts(self, pod_doc):
        mounts = container_mounts(pod_doc, "app")

        assert [m.mount_path for m in mounts] == [
            "/etc/cfg",
            "/var/run/secrets/kubernetes.io/serviceaccount",
        ]
        assert mounts[1].read_only is True

    @pytest.mark.parametrize("plain,with_sub_path", [(0, 0), (1, 2), (3, 0), (0, 4)])
    def test_keeps_exactly_the_plain_mounts(self, pod_doc, plain, with_sub_path):
        """N plain and M subPath mounts yield exactly the N plain mounts."""
        pod_doc["spec"]["containers"][0]["volumeMounts"] = [
            {"name": f"v{i}", "mountPath": f"/plain/{i}"} for i in range(plain)
        ] + [
            {"name": f"s{i}", "mountPath": f"/sub/{i}", "subPath": f"f{i}"}
            for i in range(with_sub_path)
        ]

        mounts = container_mounts(pod_doc, "app")

        assert len(mounts) == plain
        assert all(m.mount_path.startswith("/plain/") for m in mounts)

    def test_sub_path_expr_is_excluded(self, pod_doc):
        pod_doc["spec"]["containers"][0]["volumeMounts"] = [
            {"name": "logs", "mountPath": "/logs", "subPathExpr": "$(POD_NAME)"}
        ]

        assert container_mounts(pod_doc, "app") == []

    def test_container_without_mounts(self, pod_doc):
        assert container_mounts(pod_doc, "sidecar") == []

    def test_unknown_target(self, pod_doc):
        with pytest.raises(TargetNotFoundError, match="app, sidecar"):
            container_mounts(pod_doc, "worker")


class TestContainerSecurityContext:
    def test_returns_context(self, pod_doc):
        assert container_security_context(pod_doc, "app") == {
            "runAsUser": 1000,
            "runAsNonRoot": True,
        }

    def test_absent_context_is_none(self, pod_doc):
        assert container_security_context(pod_doc, "sidecar") is None


class TestSnapshotContainer:
    def test_snapshot(self, pod_doc):
        snapshot = snapshot_container(pod_doc, "app")

        assert snapshot.name == "app"
        assert snapshot.volume_mounts[0] == VolumeMount(name="cfg", mount_path="/etc/cfg")
        assert snapshot.security_context == {"runAsUser": 1000, "runAsNonRoot": True}

    def test_reading_twice_gives_same_snapshot(self, pod_doc):
        """Snapshots of an unchanged pod are equal."""
        first = snapshot_container(copy.deepcopy(pod_doc), "app")
        second = snapshot_container(copy.deepcopy(pod_doc), "app")

        assert first == second


class TestEphemeralStatuses:
    def test_absent_field(self, pod_doc):
        assert ephemeral_statuses(pod_doc) == []

    def test_null_and_empty_field(self, pod_doc):
        pod_doc["status"]["ephemeralContainerStatuses"] = None
        assert ephemeral_statuses(pod_doc) == []

        pod_doc["status"]["ephemeralContainerStatuses"] = []
        assert ephemeral_statuses(pod_doc) == []

    def test_parses_states(self, pod_doc):
        pod_doc["status"]["ephemeralContainerStatuses"] = [
            {"name": "debugger-abcde", "state": {"running": {"startedAt": "2025-01-01T00:00:00Z"}}},
            {"name": "debugger-fghij", "state": {"waiting": {"reason": "ContainerCreating"}}},
            {"name": "debugger-klmno", "state": {"terminated": {"exitCode": 0}}},
            {"name": "debugger-pqrst", "state": {"running": None}},
            {"name": "debugger-uvwxy"},
        ]

        statuses = ephemeral_statuses(pod_doc)

        assert [s.state for s in statuses] == [
            ContainerState.RUNNING,
            ContainerState.WAITING,
            ContainerState.TERMINATED,
            ContainerState.WAITING,
            ContainerState.WAITING,
        ]


class TestContainerNames:
    def test_includes_all_container_kinds(self, pod_doc):
        pod_doc["spec"]["ephemeralContainers"] = [{"name": "debugger-abcde"}]

        assert container_names(pod_doc) == {"app", "sidecar", "migrate", "debugger-abcde"}


class TestClusterAPI:
    """Tests for ClusterAPI.get_pod - HTTP status mapping."""

    def _api(self, handler) -> ClusterAPI:
        return ClusterAPI("http://localhost:8001/", transport=httpx.MockTransport(handler))

    def test_get_pod(self, pod_doc):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=pod_doc)

        with self._api(handler) as api:
            assert api.get_pod(POD) == pod_doc

        assert seen[0].method == "GET"
        assert seen[0].url.path == "/api/v1/namespaces/shop/pods/web-1"

    def test_strips_trailing_slash(self):
        api = ClusterAPI("http://localhost:8001/")

        assert api.base_url == "http://localhost:8001"
        api.close()

    def test_not_found(self):
        with self._api(lambda request: httpx.Response(404, json={"message": "nope"})) as api:
            with pytest.raises(NotFoundError):
                api.get_pod(POD)

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_auth_errors(self, status_code):
        body = {"kind": "Status", "message": "pods is forbidden"}
        with self._api(lambda request: httpx.Response(status_code, json=body)) as api:
            with pytest.raises(AuthError, match="pods is forbidden"):
                api.get_pod(POD)

    def test_unreachable_proxy(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with self._api(handler) as api:
            with pytest.raises(ConnectivityError, match="localhost:8001"):
                api.get_pod(POD)

from typing import Any

import pytest


@pytest.fixture
def pod_doc() -> dict[str, Any]:
    """A pod with one app container and one sidecar."""
    return {
        "metadata": {"name": "web-1", "namespace": "shop"},
        "spec": {
            "containers": [
                {
                    "name": "app",
                    "image": "shop/app:1.2",
                    "volumeMounts": [
                        {"name": "cfg", "mountPath": "/etc/cfg"},
                        {
                            "name": "kube-api-access-x1",
                            "mountPath": "/var/run/secrets/kubernetes.io/serviceaccount",
                            "readOnly": True,
                        },
                        {
                            "name": "cfg",
                            "mountPath": "/etc/nginx/nginx.conf",
                            "subPath": "nginx.conf",
                        },
                    ],
                    "securityContext": {"runAsUser": 1000, "runAsNonRoot": True},
                },
                {"name": "sidecar", "image": "envoy:1.30"},
            ],
            "initContainers": [{"name": "migrate", "image": "shop/app:1.2"}],
        },
        "status": {"phase": "Running"},
    }

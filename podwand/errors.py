"""Exceptions raised by podwand."""

import json
from typing import Any


class PodwandError(Exception):
    """Base exception for podwand errors."""


class ValidationError(PodwandError):
    """Raised when required input is missing or malformed."""


class PodLookupError(PodwandError):
    """Raised when a pod, namespace or container cannot be found."""


class NotFoundError(PodLookupError):
    """Raised when the pod or its namespace does not exist."""


class TargetNotFoundError(PodLookupError):
    """Raised when no container in the pod matches the target name."""


class AuthError(PodwandError):
    """Raised when the cluster rejects the current credentials."""


class KubectlError(PodwandError):
    """Raised when a kubectl invocation fails for any other reason."""


class GatewayError(PodwandError):
    """Raised when the local API proxy is unusable."""


class GatewayStartError(GatewayError):
    """Raised when `kubectl proxy` could not be started."""


class ConnectivityError(GatewayError):
    """Raised when the local API proxy cannot be reached.

    `patch` is set when the failure happened while sending the ephemeral
    container patch, so the caller can show what may not have been applied.
    """

    def __init__(self, message: str, patch: dict[str, Any] | None = None):
        self.patch = patch
        super().__init__(message)

    def patch_json(self) -> str:
        return json.dumps(self.patch, indent=2)


class PatchRejectedError(PodwandError):
    """Raised when the API server refuses the ephemeral container patch."""

    def __init__(self, status_code: int, detail: str, patch: dict[str, Any]):
        self.status_code = status_code
        self.detail = detail
        self.patch = patch
        super().__init__(f"HTTP {status_code}: {detail}")

    def patch_json(self) -> str:
        return json.dumps(self.patch, indent=2)


class UserAbort(PodwandError):
    """Raised when the user declines to continue."""

"""Type definitions for podwand."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class PodRef:
    namespace: str
    name: str


@dataclass
class VolumeMount:
    name: str
    mount_path: str
    read_only: bool = False
    sub_path: str | None = None
    sub_path_expr: str | None = None
    mount_propagation: str | None = None

    @property
    def has_sub_path(self) -> bool:
        return bool(self.sub_path or self.sub_path_expr)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VolumeMount":
        return cls(
            name=data["name"],
            mount_path=data["mountPath"],
            read_only=data.get("readOnly", False),
            sub_path=data.get("subPath"),
            sub_path_expr=data.get("subPathExpr"),
            mount_propagation=data.get("mountPropagation"),
        )

    def to_dict(self) -> dict[str, Any]:
        mount: dict[str, Any] = {"name": self.name, "mountPath": self.mount_path}
        if self.read_only:
            mount["readOnly"] = True
        if self.mount_propagation:
            mount["mountPropagation"] = self.mount_propagation
        return mount


@dataclass
class ContainerSnapshot:
    name: str
    volume_mounts: list[VolumeMount]
    security_context: dict[str, Any] | None = None


@dataclass
class EphemeralContainerSpec:
    name: str
    image: str
    command: list[str]
    target_container_name: str
    volume_mounts: list[VolumeMount] = field(default_factory=list)
    security_context: dict[str, Any] | None = None
    stdin: bool = True
    tty: bool = True

    def to_dict(self) -> dict[str, Any]:
        container: dict[str, Any] = {
            "name": self.name,
            "image": self.image,
            "command": list(self.command),
            "stdin": self.stdin,
            "tty": self.tty,
            "targetContainerName": self.target_container_name,
            "volumeMounts": [mount.to_dict() for mount in self.volume_mounts],
        }
        if self.security_context is not None:
            container["securityContext"] = self.security_context
        return container


class ContainerState(str, Enum):
    WAITING = "waiting"
    RUNNING = "running"
    TERMINATED = "terminated"


@dataclass
class EphemeralContainerStatus:
    name: str
    state: ContainerState

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EphemeralContainerStatus":
        # state looks like {"running": {"startedAt": ...}}; null/empty means not yet
        state = data.get("state") or {}
        if state.get("running"):
            container_state = ContainerState.RUNNING
        elif state.get("terminated"):
            container_state = ContainerState.TERMINATED
        else:
            container_state = ContainerState.WAITING
        return cls(name=data["name"], state=container_state)


class ReadinessState(str, Enum):
    WAITING = "waiting"
    RUNNING = "running"
    TIMED_OUT = "timed_out"


@dataclass
class PollResult:
    state: ReadinessState
    attempts: int


@dataclass
class DebugOutcome:
    container: str
    readiness: PollResult
    attach_exit_code: int | None = None


@dataclass
class PollPolicy:
    """Bounded timing for the proxy warm-up and the readiness poll."""

    attempts: int = 10
    interval: float = 1.0
    gateway_warmup: float = 2.0


@dataclass
class DebugConfig:
    pod: PodRef
    target: str
    image: str = "busybox"
    command: list[str] = field(default_factory=lambda: ["sh"])
    proxy_port: int = 8001
    use_root: bool = False
    auto_attach: bool = False
    assume_yes: bool = False
    policy: PollPolicy = field(default_factory=PollPolicy)

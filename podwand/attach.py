"""Interactive attach to a debug container via `kubectl attach`."""

import subprocess

from podwand.types import PodRef
from podwand.ui import print_debug, print_step


def attach_command(pod: PodRef, container: str) -> list[str]:
    return [
        "kubectl",
        "attach",
        "-it",
        "-n",
        pod.namespace,
        pod.name,
        "-c",
        container,
    ]


def attach(pod: PodRef, container: str) -> int:
    """Hand the terminal over to the debug container and return kubectl's exit code."""
    cmd = attach_command(pod, container)
    print_step(f"Attaching to [cyan]{container}[/cyan]...", prefix="🔌")
    print_debug(f"Running: {' '.join(cmd)}")
    return subprocess.run(cmd).returncode

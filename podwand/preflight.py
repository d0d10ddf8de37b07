"""Checks run before the pod is mutated."""

import typer

from podwand.errors import UserAbort
from podwand.types import ContainerState, EphemeralContainerStatus, PodRef
from podwand.ui import print_running_debuggers


def check_running(statuses: list[EphemeralContainerStatus]) -> list[str]:
    return [s.name for s in statuses if s.state == ContainerState.RUNNING]


def confirm_continue(pod: PodRef, running: list[str], assume_yes: bool = False):
    """Ask before adding another debugger to a pod that already has one running.

    Raises:
        UserAbort: If the user answers anything but yes
    """
    if not running:
        return

    print_running_debuggers(pod, running)
    if assume_yes:
        return

    if not typer.confirm("Spawn another debug container anyway?", default=False):
        raise UserAbort("Aborted, no debug container was added.")

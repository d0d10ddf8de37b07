"""Ephemeral debug container operations for podwand."""

from podwand.attach import attach
from podwand.gateway import GatewaySession
from podwand.patch import apply_patch, build
from podwand.pods import (
    container_names,
    ephemeral_statuses,
    fetch_pod,
    snapshot_container,
)
from podwand.preflight import check_running, confirm_continue
from podwand.readiness import poll_until_running
from podwand.types import (
    DebugConfig,
    DebugOutcome,
    EphemeralContainerStatus,
    PodRef,
    ReadinessState,
)
from podwand.ui import (
    print_info,
    print_ready_info,
    print_step,
    print_success,
    print_timeout_info,
)


def list_ephemeral(pod: PodRef) -> list[EphemeralContainerStatus]:
    return ephemeral_statuses(fetch_pod(pod))


def run_debug(config: DebugConfig) -> DebugOutcome:
    """Add a debug container next to `config.target` and wait for it to run.

    The pod is read and the container built before the API proxy starts; the
    proxy is only held for the patch and the readiness poll.
    """
    pod = config.pod

    print_step(
        f"Reading pod [blue]{pod.name}[/blue] in namespace [magenta]{pod.namespace}[/magenta]..."
    )
    doc = fetch_pod(pod)

    confirm_continue(pod, check_running(ephemeral_statuses(doc)), config.assume_yes)

    snapshot = snapshot_container(doc, config.target)
    print_info(
        f"Copying {len(snapshot.volume_mounts)} volume mount(s) from [cyan]{snapshot.name}[/cyan]"
    )
    spec = build(
        snapshot,
        image=config.image,
        command=config.command,
        use_root=config.use_root,
        existing_names=container_names(doc),
    )

    with GatewaySession(config.proxy_port, config.policy.gateway_warmup) as gateway:
        with gateway.api() as api:
            print_step(
                f"Adding debug container [cyan bold]{spec.name}[/cyan bold] ({spec.image})..."
            )
            name = apply_patch(api, pod, spec)
            print_success(f"Debug container [cyan]{name}[/cyan] added to [blue]{pod.name}[/blue]")

            print_step("Waiting for the debug container to start...", prefix="⏳")
            result = poll_until_running(lambda: api.get_pod(pod), name, config.policy)

    outcome = DebugOutcome(container=name, readiness=result)
    if result.state == ReadinessState.RUNNING:
        print_ready_info(pod, name)
        if config.auto_attach:
            outcome.attach_exit_code = attach(pod, name)
    else:
        print_timeout_info(pod, name, result.attempts)

    return outcome

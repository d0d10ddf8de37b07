import shlex

import typer

from podwand.errors import (
    ConnectivityError,
    PatchRejectedError,
    PodwandError,
    UserAbort,
    ValidationError,
)
from podwand.operations import list_ephemeral, run_debug
from podwand.pods import current_namespace
from podwand.types import DebugConfig, PodRef, PollPolicy
from podwand.ui import print_info, render_ephemeral_table, set_verbose

app = typer.Typer()


def _resolve_pod(pod: str, namespace: str | None) -> PodRef:
    if not pod:
        raise ValidationError("A pod name is required.")
    return PodRef(namespace=namespace or current_namespace(), name=pod)


def _handle_error(e: PodwandError):
    if isinstance(e, UserAbort):
        typer.echo(f"🛑 {e}", err=True)
    else:
        typer.echo(f"❌ {e}", err=True)

    if isinstance(e, PatchRejectedError):
        typer.echo("Rejected patch:", err=True)
        typer.echo(e.patch_json(), err=True)
    elif isinstance(e, ConnectivityError) and e.patch is not None:
        typer.echo("Patch that may not have reached the cluster:", err=True)
        typer.echo(e.patch_json(), err=True)
    raise typer.Exit(code=1)


@app.command(help="Add an ephemeral debug container next to a container in a pod.")
def debug(
    pod: str = typer.Argument(..., help="The pod to debug."),
    target: str = typer.Option(
        ...,
        "--target",
        "-c",
        help="The container to debug. Its volume mounts are copied to the debugger.",
    ),
    namespace: str = typer.Option(
        None,
        "--namespace",
        "-n",
        help="The namespace of the pod. Defaults to the current kubectl context.",
    ),
    image: str = typer.Option(
        "busybox",
        "--image",
        "-i",
        envvar="PODWAND_IMAGE",
        help="The image to run in the debug container.",
    ),
    command: str = typer.Option(
        "sh", "--command", help="The command to run in the debug container."
    ),
    port: int = typer.Option(
        8001,
        "--port",
        "-p",
        envvar="PODWAND_PROXY_PORT",
        help="The local port for kubectl proxy.",
    ),
    root: bool = typer.Option(
        False,
        "--root",
        help="Run the debug container as root instead of copying the target's security context.",
    ),
    attach: bool = typer.Option(
        False, "--attach", "-a", help="Attach to the debug container once it is running."
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Don't ask for confirmation when a debug container is already running.",
    ),
    attempts: int = typer.Option(
        10, "--attempts", min=1, help="How many times to check that the container is running."
    ),
    interval: float = typer.Option(
        1.0, "--interval", min=0.0, help="Seconds between readiness checks."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Print the patch and every API call."
    ),
):
    set_verbose(verbose)
    try:
        argv = shlex.split(command)
    except ValueError as e:
        # unbalanced quotes
        typer.echo(f"❌ Invalid --command: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        if not argv:
            raise ValidationError("--command must not be empty.")

        config = DebugConfig(
            pod=_resolve_pod(pod, namespace),
            target=target,
            image=image,
            command=argv,
            proxy_port=port,
            use_root=root,
            auto_attach=attach,
            assume_yes=yes,
            policy=PollPolicy(attempts=attempts, interval=interval),
        )
        outcome = run_debug(config)
    except PodwandError as e:
        _handle_error(e)

    # kubectl attach exit status, e.g. the shell exiting non-zero
    if outcome.attach_exit_code:
        raise typer.Exit(code=outcome.attach_exit_code)


@app.command(name="list", help="List the ephemeral containers of a pod.")
def list_containers(
    pod: str = typer.Argument(..., help="The pod to inspect."),
    namespace: str = typer.Option(
        None,
        "--namespace",
        "-n",
        help="The namespace of the pod. Defaults to the current kubectl context.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    set_verbose(verbose)
    try:
        pod_ref = _resolve_pod(pod, namespace)
        statuses = list_ephemeral(pod_ref)
    except PodwandError as e:
        _handle_error(e)

    if not statuses:
        print_info(f"No ephemeral containers in pod {pod_ref.name}.")
        return
    render_ephemeral_table(pod_ref, statuses)


if __name__ == "__main__":
    app()

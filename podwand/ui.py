import json
import os
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from podwand.types import ContainerState, EphemeralContainerStatus, PodRef

# Global console for UI functions
_console = Console()
_err_console = Console(stderr=True)

# Check if we should use simple UI (e.g., when running in CI)
_use_simple_ui = os.getenv("PODWAND_SIMPLE_UI") == "1"

_verbose = False


def set_verbose(enabled: bool):
    global _verbose
    _verbose = enabled


def attach_hint(pod: PodRef, container: str) -> str:
    return f"kubectl attach -it -n {pod.namespace} {pod.name} -c {container}"


def render_ephemeral_table(pod: PodRef, statuses: list[EphemeralContainerStatus]):
    table = Table(title=f"Ephemeral containers in {pod.namespace}/{pod.name}")

    table.add_column("Container", style="cyan", no_wrap=True)
    table.add_column("State", style="green")
    table.add_column("Reconnect", style="dim")

    for status in statuses:
        style = {
            ContainerState.RUNNING: "green",
            ContainerState.WAITING: "yellow",
            ContainerState.TERMINATED: "red",
        }[status.state]
        reconnect = (
            attach_hint(pod, status.name)
            if status.state == ContainerState.RUNNING
            else ""
        )
        table.add_row(
            status.name, f"[{style}]{status.state.value}[/{style}]", reconnect
        )

    _console.print(table)


def print_running_debuggers(pod: PodRef, names: list[str]):
    """Print the ephemeral containers that are already running, with reconnect commands."""
    _console.print()
    lines = "\n".join(
        f"[cyan bold]{name}[/cyan bold]: {attach_hint(pod, name)}" for name in names
    )

    if _use_simple_ui:
        _console.print(
            "[yellow]======================= Running debug containers =======================[/yellow]"
        )
        _console.print(lines)
        _console.print("[yellow]" + "=" * 74 + "[/yellow]")
    else:
        _console.print(
            Panel(
                f"Pod [blue]{pod.name}[/blue] already has running debug containers.\n"
                f"Reconnect to one of them instead of spawning another:\n\n{lines}",
                border_style="yellow",
                title="Running debug containers",
                expand=False,
            )
        )


def print_success(message: str, prefix: str = "✅"):
    """Print a success message."""
    _console.print(f"[green]{prefix}[/green] {message}")


def print_info(message: str, prefix: str = "ℹ️"):
    """Print an info message."""
    _console.print(f"[blue]{prefix}[/blue]  {message}")


def print_step(message: str, prefix: str = "🔧"):
    """Print a step/progress message."""
    _console.print(f"[cyan]{prefix}[/cyan] {message}")


def print_warning(message: str, prefix: str = "⚠️"):
    """Print a warning to stderr."""
    _err_console.print(f"[yellow]{prefix}[/yellow]  {message}")


def print_debug(message: str):
    """Print a diagnostic message when --verbose is set."""
    if _verbose:
        _console.print(f"[dim]🐛 {escape(message)}[/dim]", highlight=False)


def print_document(title: str, document: dict[str, Any]):
    """Print a JSON document when --verbose is set."""
    if _verbose:
        print_debug(f"{title}:\n{json.dumps(document, indent=2)}")


def print_ready_info(pod: PodRef, container: str):
    """Print attach instructions for a running debug container."""
    _console.print()

    if _use_simple_ui:
        _console.print("[green]" + "=" * 42 + "[/green]")
        _console.print("[green bold]🎉 Debug container ready![/green bold]")
        _console.print()
        _console.print(f"Attach with: [cyan bold]{attach_hint(pod, container)}[/cyan bold]")
        _console.print("[green]" + "=" * 42 + "[/green]")
    else:
        _console.print(
            Panel(
                f"[green bold]🎉 Debug container ready![/green bold]\n\n"
                f"Attach with: [cyan bold]{attach_hint(pod, container)}[/cyan bold]",
                border_style="green",
                expand=False,
            )
        )


def print_timeout_info(pod: PodRef, container: str, attempts: int):
    """Print the report for a debug container that is still not running."""
    _console.print()
    message = (
        f"Container [cyan]{container}[/cyan] is still not ready after {attempts} checks.\n"
        f"It may need more time (e.g. pulling its image). Check it with:\n\n"
        f"  kubectl get pod -n {pod.namespace} {pod.name} "
        f"-o jsonpath='{{.status.ephemeralContainerStatuses}}'\n\n"
        f"and attach with: [cyan bold]{attach_hint(pod, container)}[/cyan bold]"
    )

    if _use_simple_ui:
        _console.print("[yellow]" + "=" * 42 + "[/yellow]")
        _console.print(message)
        _console.print("[yellow]" + "=" * 42 + "[/yellow]")
    else:
        _console.print(
            Panel(message, border_style="yellow", title="Still not ready", expand=False)
        )

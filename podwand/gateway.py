"""Local `kubectl proxy` session used to talk to the cluster API."""

import signal
import socket
import subprocess
import time

from podwand.errors import GatewayStartError
from podwand.pods import ClusterAPI
from podwand.ui import print_debug, print_step, print_success, print_warning

# Signals that must unwind the session instead of killing the process outright
_TEARDOWN_SIGNALS = [signal.SIGTERM, signal.SIGHUP]


def is_port_available(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind(("127.0.0.1", port))
            return True
        except OSError:
            return False


def _exit_on_signal(signum, frame):
    raise SystemExit(128 + signum)


class GatewaySession:
    """Owns a background `kubectl proxy` process.

    Use as a context manager: the proxy is terminated exactly once however the
    block exits, including SIGTERM/SIGHUP (routed to SystemExit) and Ctrl+C.
    """

    def __init__(self, port: int, warmup: float = 2.0):
        self.port = port
        self.warmup = warmup
        self.process: subprocess.Popen[bytes] | None = None
        self._closed = False
        self._previous_handlers: dict[int, object] = {}

    @property
    def base_url(self) -> str:
        return f"http://localhost:{self.port}"

    def open(self) -> "GatewaySession":
        if not is_port_available(self.port):
            raise GatewayStartError(
                f"Port {self.port} is already in use.\n"
                f"Tip: Stop the other process or use a different port with --port"
            )

        print_step(f"Starting API proxy on port [cyan]{self.port}[/cyan]...")
        cmd = ["kubectl", "proxy", f"--port={self.port}"]
        print_debug(f"Running: {' '.join(cmd)}")
        try:
            self.process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError:
            raise GatewayStartError("kubectl not found on PATH.")

        self._install_signal_handlers()

        # __exit__ does not run if we fail here, so tear down ourselves
        try:
            # kubectl proxy gives no readiness signal, so wait a fixed warm-up
            time.sleep(self.warmup)

            if self.process.poll() is not None:
                stderr = self.process.stderr.read().decode().strip()
                raise GatewayStartError(
                    f"kubectl proxy exited with code {self.process.returncode}: {stderr}"
                )
        except BaseException:
            self.close()
            raise

        print_success(f"API proxy listening on [cyan]{self.base_url}[/cyan]")
        return self

    def api(self) -> ClusterAPI:
        return ClusterAPI(self.base_url)

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._restore_signal_handlers()

        if self.process is None:
            return

        try:
            if self.process.poll() is None:
                print_step("Stopping API proxy...", prefix="🧹")
                self.process.terminate()
                try:
                    self.process.wait(timeout=5)
                except subprocess.TimeoutExpired:
                    self.process.kill()
                    self.process.wait()
        except OSError as e:
            # Never let teardown hide the error that got us here
            print_warning(f"Failed to stop API proxy (PID {self.process.pid}): {e}")

    def __enter__(self) -> "GatewaySession":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _install_signal_handlers(self):
        for sig in _TEARDOWN_SIGNALS:
            try:
                self._previous_handlers[sig] = signal.signal(sig, _exit_on_signal)
            except ValueError:
                # Not on the main thread; context manager exit still cleans up
                pass

    def _restore_signal_handlers(self):
        for sig, handler in self._previous_handlers.items():
            # None means the previous handler was not installed from Python
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
        self._previous_handlers.clear()

"""
Tunneled reachability through ``kubectl port-forward``.

Forwards a free local port to the ClickHouse Pod for as long as the strategy's
context is open. Used when running outside the cluster.
"""

import socket
import subprocess
import time
from typing import Callable, List, Optional

from .base import BaseReachability
from ..core.exceptions import RetrievalPreconditionError
from ..utils.config import OrchestratorConfig
from ..utils.logger import get_logger


LOCALHOST = "127.0.0.1"


def find_free_port() -> int:
    """Ask the OS for a currently unused local TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((LOCALHOST, 0))
        return sock.getsockname()[1]


def port_accepts_connections(port: int) -> bool:
    try:
        with socket.create_connection((LOCALHOST, port), timeout=0.5):
            return True
    except OSError:
        return False


class PortForwardReachability(BaseReachability):
    """
    Reach ClickHouse through a local port forwarded to its Pod.

    The forwarder subprocess is terminated when the context exits, whether the
    query succeeded, failed or was interrupted.
    """

    def __init__(
        self,
        pod_name: str,
        config: OrchestratorConfig,
        kubeconfig: Optional[str] = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        probe: Callable[[int], bool] = port_accepts_connections,
        local_port: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the port-forward strategy.

        Args:
            pod_name: ClickHouse Pod to forward to
            config: Orchestrator configuration
            kubeconfig: Kubeconfig file passed to kubectl
            popen: Subprocess factory
            probe: Callable checking whether the local port is ready
            local_port: Fixed local port, a free one is picked when omitted
            sleep: Sleep function used between readiness probes
            clock: Monotonic clock used for the readiness deadline
        """
        super().__init__()
        self.pod_name = pod_name
        self.config = config
        self.kubeconfig = kubeconfig
        self._popen = popen
        self._probe = probe
        self._local_port = local_port
        self._sleep = sleep
        self._clock = clock
        self.process: Optional[subprocess.Popen] = None
        self.logger = get_logger(__name__)

    def command(self, local_port: int) -> List[str]:
        cmd = [
            self.config.kubectl,
            "port-forward",
            "--namespace", self.config.namespace,
            "--address", LOCALHOST,
            f"pod/{self.pod_name}",
            f"{local_port}:{self.config.clickhouse_http_port}",
        ]
        if self.kubeconfig:
            cmd += ["--kubeconfig", self.kubeconfig]
        return cmd

    def open(self) -> str:
        local_port = self._local_port or find_free_port()

        try:
            self.process = self._popen(
                self.command(local_port),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise RetrievalPreconditionError(
                f"failed to start port forwarding to ClickHouse Pod {self.pod_name}: {e}",
                component="port-forward",
            )

        deadline = self._clock() + self.config.port_forward_ready_timeout
        while not self._probe(local_port):
            if self.process.poll() is not None:
                stderr = self.process.stderr.read() if self.process.stderr else ""
                raise RetrievalPreconditionError(
                    f"port forwarding to ClickHouse Pod {self.pod_name} exited with code "
                    f"{self.process.returncode}: {stderr.strip()}",
                    component="port-forward",
                )
            if self._clock() >= deadline:
                raise RetrievalPreconditionError(
                    f"port forwarding to ClickHouse Pod {self.pod_name} was not ready after "
                    f"{self.config.port_forward_ready_timeout:g} seconds",
                    component="port-forward",
                )
            self._sleep(0.1)

        self.logger.debug(f"Forwarding {LOCALHOST}:{local_port} to ClickHouse Pod {self.pod_name}")
        return f"http://{LOCALHOST}:{local_port}"

    def close(self) -> None:
        process, self.process = self.process, None
        if process is None:
            return

        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()
        if process.stderr:
            process.stderr.close()
        self.logger.debug(f"Stopped port forwarding to ClickHouse Pod {self.pod_name}")

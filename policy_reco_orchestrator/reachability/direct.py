"""
Direct reachability.

Connects to the ClickHouse Service through its ClusterIP, or to an endpoint
supplied by the caller. Only usable from inside the cluster network unless an
external endpoint is given.
"""

from typing import Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from .base import BaseReachability
from ..core.exceptions import RetrievalPreconditionError
from ..utils.config import OrchestratorConfig
from ..utils.kube import TRANSPORT_ERRORS
from ..utils.logger import get_logger


class DirectReachability(BaseReachability):
    """Reach ClickHouse at its in-cluster Service address or a fixed endpoint."""

    def __init__(
        self,
        core_api: client.CoreV1Api,
        config: OrchestratorConfig,
        endpoint: Optional[str] = None
    ):
        super().__init__()
        self.core_api = core_api
        self.config = config
        self.fixed_endpoint = endpoint
        self.logger = get_logger(__name__)

    def open(self) -> str:
        if self.fixed_endpoint:
            self.logger.debug(f"Using ClickHouse endpoint {self.fixed_endpoint}")
            return self.fixed_endpoint

        try:
            service = self.core_api.read_namespaced_service(self.config.clickhouse_service, self.config.namespace)
        except ApiException as e:
            raise RetrievalPreconditionError(
                f"error when finding the ClickHouse Service {self.config.clickhouse_service} "
                f"in namespace {self.config.namespace}: {e.reason}",
                component="clickhouse",
            )
        except TRANSPORT_ERRORS as e:
            raise RetrievalPreconditionError(
                f"error when finding the ClickHouse Service {self.config.clickhouse_service}, "
                f"control plane unreachable: {e}",
                component="clickhouse",
            )

        cluster_ip = service.spec.cluster_ip
        if not cluster_ip or cluster_ip == "None":
            raise RetrievalPreconditionError(
                f"ClickHouse Service {self.config.clickhouse_service} has no ClusterIP",
                component="clickhouse",
            )

        port = self.config.clickhouse_http_port
        for service_port in service.spec.ports or []:
            if service_port.name == self.config.clickhouse_http_port_name:
                port = service_port.port
                break

        # IPv6 literals need brackets inside URLs
        host = f"[{cluster_ip}]" if ":" in cluster_ip else cluster_ip
        endpoint = f"http://{host}:{port}"
        self.logger.debug(f"Using ClickHouse Service address {endpoint}")
        return endpoint

    def close(self) -> None:
        pass

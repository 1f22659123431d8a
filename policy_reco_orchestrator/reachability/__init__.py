"""
Reachability strategies for the ClickHouse backing store.

- DirectReachability: ClusterIP of the ClickHouse Service, or a supplied endpoint
- PortForwardReachability: local port forwarded to the ClickHouse Pod
"""

from typing import Optional

from kubernetes import client

from .base import BaseReachability
from .direct import DirectReachability
from .port_forward import PortForwardReachability
from ..utils.config import OrchestratorConfig
from ..utils.kube import require_running_pod


def select_reachability(
    core_api: client.CoreV1Api,
    config: OrchestratorConfig,
    use_cluster_ip: bool = False,
    endpoint: Optional[str] = None,
    kubeconfig: Optional[str] = None
) -> BaseReachability:
    """
    Pick the reachability strategy for a retrieval.

    A supplied endpoint always wins; otherwise ``use_cluster_ip`` selects the
    direct Service address over port forwarding.
    """
    if endpoint or use_cluster_ip:
        return DirectReachability(core_api, config, endpoint=endpoint)

    pod_name = require_running_pod(core_api, config.namespace, config.clickhouse_selector, "ClickHouse")
    return PortForwardReachability(pod_name, config, kubeconfig=kubeconfig)


__all__ = [
    'BaseReachability',
    'DirectReachability',
    'PortForwardReachability',
    'select_reachability'
]

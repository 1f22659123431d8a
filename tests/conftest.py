"""Shared fixtures for the policy_reco_orchestrator test suite."""

import base64
import logging
from dataclasses import replace
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List, Optional
from unittest.mock import MagicMock

import pytest

from policy_reco_orchestrator.models.job import JobState
from policy_reco_orchestrator.reachability.base import BaseReachability
from policy_reco_orchestrator.utils.config import OrchestratorConfig
from policy_reco_orchestrator.utils.logger import PACKAGE_LOGGER


# ---------------------------------------------------------------------------
# Factory functions
# ---------------------------------------------------------------------------


def make_params(**overrides: Any) -> Dict[str, Any]:
    """Raw invocation parameters accepted by validate_request."""
    params: Dict[str, Any] = {
        "type": "initial",
        "limit": 0,
        "option": "anp-deny-applied",
        "start_time": "",
        "end_time": "",
        "ns_allow_list": "",
        "rm_labels": True,
        "to_services": True,
        "executor_instances": 1,
        "driver_core_request": "200m",
        "driver_memory": "512M",
        "executor_core_request": "200m",
        "executor_memory": "512M",
    }
    params.update(overrides)
    return params


def make_config(**overrides: Any) -> OrchestratorConfig:
    return replace(OrchestratorConfig(), **overrides)


def make_pod(name: str, phase: str = "Running") -> SimpleNamespace:
    return SimpleNamespace(
        metadata=SimpleNamespace(name=name),
        status=SimpleNamespace(phase=phase),
    )


def make_secret(username: str = "clickhouse_operator", password: str = "clickhouse_operator_password"):
    return SimpleNamespace(data={
        "username": base64.b64encode(username.encode()).decode(),
        "password": base64.b64encode(password.encode()).decode(),
    })


def make_service(cluster_ip: str = "10.96.0.42", ports: Optional[List[SimpleNamespace]] = None):
    if ports is None:
        ports = [
            SimpleNamespace(name="http", port=8123),
            SimpleNamespace(name="tcp", port=9000),
        ]
    return SimpleNamespace(spec=SimpleNamespace(cluster_ip=cluster_ip, ports=ports))


def make_core_api(
    pods_by_selector: Optional[Dict[str, List[SimpleNamespace]]] = None,
    secret: Optional[SimpleNamespace] = None,
    service: Optional[SimpleNamespace] = None,
) -> MagicMock:
    """CoreV1Api mock serving pods per label selector, a secret and a service."""
    if pods_by_selector is None:
        pods_by_selector = {
            "app=clickhouse": [make_pod("chi-clickhouse-clickhouse-0-0-0")],
            "app.kubernetes.io/name=spark-operator": [make_pod("policy-reco-spark-operator-0")],
        }

    core_api = MagicMock()
    core_api.list_namespaced_pod.side_effect = lambda namespace, label_selector=None: SimpleNamespace(
        items=pods_by_selector.get(label_selector, [])
    )
    core_api.read_namespaced_secret.return_value = secret or make_secret()
    core_api.read_namespaced_service.return_value = service or make_service()
    return core_api


class ScriptedStates:
    """State source returning a fixed sequence of states, repeating the last one."""

    def __init__(self, states: Iterable[JobState]):
        self.states = list(states)
        self.calls = 0

    def __call__(self, job_id: str) -> JobState:
        index = min(self.calls, len(self.states) - 1)
        self.calls += 1
        return self.states[index]


class FakeClock:
    """Monotonic clock advanced only by its sleep method."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeReachability(BaseReachability):
    """Reachability strategy recording how often it was opened and closed."""

    def __init__(self, endpoint: str = "http://clickhouse.test:8123"):
        super().__init__()
        self.fixed = endpoint
        self.opened = 0
        self.closed = 0

    def open(self) -> str:
        self.opened += 1
        return self.fixed

    def close(self) -> None:
        self.closed += 1


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI attaches so later tests don't log into closed streams."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in [h for h in logger.handlers if not isinstance(h, logging.NullHandler)]:
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def config() -> OrchestratorConfig:
    return make_config()


@pytest.fixture
def core_api() -> MagicMock:
    return make_core_api()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()

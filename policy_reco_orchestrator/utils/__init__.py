"""
Utilities package for the Policy Recommendation Orchestrator

Contains utility modules for configuration, logging, Kubernetes access and
ClickHouse queries.
"""

from .config import OrchestratorConfig, load_config
from .logger import setup_logger, get_logger, LoggerContext
from .clickhouse import ClickHouseClient

__all__ = [
    "OrchestratorConfig",
    "load_config",
    "setup_logger",
    "get_logger",
    "LoggerContext",
    "ClickHouseClient"
]

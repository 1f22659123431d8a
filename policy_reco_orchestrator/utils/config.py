"""
Configuration for the Policy Recommendation Orchestrator

Holds every tunable constant of the orchestrator and loads overrides from an
optional YAML file.
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Any, Optional, Union

import yaml

from ..core.exceptions import ConfigurationError


@dataclass(frozen=True)
class OrchestratorConfig:
    """Orchestrator settings with the defaults of a standard deployment."""

    # Cluster layout
    namespace: str = "flow-visibility"
    spark_operator_selector: str = "app.kubernetes.io/name=spark-operator"

    # Spark application
    spark_image: str = "antrea/theia-policy-recommendation:latest"
    spark_image_pull_policy: str = "IfNotPresent"
    spark_app_file: str = "local:///opt/spark/work-dir/policy_recommendation_job.py"
    spark_service_account: str = "policy-reco-spark"
    spark_version: str = "3.1.1"

    # ClickHouse
    clickhouse_secret: str = "clickhouse-secret"
    clickhouse_selector: str = "app=clickhouse"
    clickhouse_service: str = "clickhouse-clickhouse"
    clickhouse_http_port_name: str = "http"
    clickhouse_http_port: int = 8123
    query_timeout: float = 60.0

    # Polling
    poll_interval: float = 5.0
    poll_timeout: float = 3600.0

    # Port forwarding
    kubectl: str = "kubectl"
    port_forward_ready_timeout: float = 10.0

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(path: Optional[Union[str, Path]] = None, **overrides) -> OrchestratorConfig:
    """
    Load orchestrator configuration.

    Args:
        path: Optional YAML file whose top-level keys override the defaults
        **overrides: Values applied on top of the file

    Returns:
        OrchestratorConfig instance

    Raises:
        ConfigurationError: If the file cannot be read or holds unknown keys
            or values of the wrong type
    """
    values: Dict[str, Any] = {}

    if path:
        try:
            with open(path, 'r') as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(str(path), f"cannot load configuration file: {e}")

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(str(path), "configuration file must contain a mapping")
        values.update(loaded)

    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name: f for f in fields(OrchestratorConfig)}
    defaults = OrchestratorConfig()
    for key, value in values.items():
        if key not in known:
            raise ConfigurationError(key, "unknown configuration key")
        expected = type(getattr(defaults, key))
        if expected is float and isinstance(value, int) and not isinstance(value, bool):
            values[key] = float(value)
        elif not isinstance(value, expected) or isinstance(value, bool) != (expected is bool):
            raise ConfigurationError(key, f"expected {expected.__name__}, got {type(value).__name__}")

    config = replace(defaults, **values)

    if config.poll_interval <= 0:
        raise ConfigurationError("poll_interval", "must be positive")
    if config.poll_timeout <= 0:
        raise ConfigurationError("poll_timeout", "must be positive")

    return config

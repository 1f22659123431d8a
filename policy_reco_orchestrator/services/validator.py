"""
Parameter validation for policy recommendation jobs.

Turns free-form invocation parameters into an immutable JobRequest. Checks run
in a fixed order and the first failing check aborts validation.
"""

import json
import re
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple
from urllib.parse import urlparse

from ..core.exceptions import ValidationError, RetrievalPreconditionError
from ..models.job import (
    JobRequest,
    RecommendationType,
    IsolationOption,
    SparkResources,
    TIME_FORMAT,
)


# Kubernetes resource quantity, e.g. 0.1, 500m, 512M, 1G
QUANTITY_PATTERN = re.compile(r"^([+-]?[0-9.]+)([eEinumkKMGTP]*[-+]?[0-9]*)$")

# Zero-padded YYYY-MM-DD hh:mm:ss, strptime alone also accepts 2022-1-1 0:0:0
TIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")

QUANTITY_FIELDS = (
    "driver_core_request",
    "driver_memory",
    "executor_core_request",
    "executor_memory",
)

_TRUE_STRINGS = {"true", "1", "yes"}
_FALSE_STRINGS = {"false", "0", "no"}


def validate_request(params: Mapping[str, Any]) -> JobRequest:
    """
    Validate raw invocation parameters.

    Args:
        params: Named parameters; missing keys take their default values

    Returns:
        A fully validated JobRequest

    Raises:
        ValidationError: On the first parameter that fails its check
    """
    defaults = JobRequest()

    reco_type = _parse_type(params.get("type", defaults.reco_type.value))
    limit = _parse_non_negative_int("limit", params.get("limit", defaults.limit))
    option = _parse_option(params.get("option", defaults.option.value))
    start_time = _parse_time("start_time", params.get("start_time"))
    end_time = _parse_time("end_time", params.get("end_time"))
    if end_time is not None and start_time is not None and not end_time > start_time:
        raise ValidationError("end_time", "end-time should be after start-time", end_time.strftime(TIME_FORMAT))
    ns_allow_list = _parse_ns_allow_list(params.get("ns_allow_list"))
    rm_labels = _parse_bool("rm_labels", params.get("rm_labels", defaults.rm_labels))
    to_services = _parse_bool("to_services", params.get("to_services", defaults.to_services))

    resource_defaults = defaults.resources
    executor_instances = _parse_non_negative_int(
        "executor_instances", params.get("executor_instances", resource_defaults.executor_instances)
    )
    quantities = {
        name: _parse_quantity(name, params.get(name, getattr(resource_defaults, name)))
        for name in QUANTITY_FIELDS
    }

    return JobRequest(
        reco_type=reco_type,
        limit=limit,
        option=option,
        start_time=start_time,
        end_time=end_time,
        ns_allow_list=ns_allow_list,
        rm_labels=rm_labels,
        to_services=to_services,
        resources=SparkResources(executor_instances=executor_instances, **quantities),
    )


def validate_endpoint(endpoint: Optional[str]) -> Optional[str]:
    """
    Check that a supplied ClickHouse endpoint is a well-formed URL.

    Returns:
        The endpoint without trailing slash, or None when none was supplied
    """
    if not endpoint:
        return None
    parsed = urlparse(endpoint)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise RetrievalPreconditionError(
            f"failed to decode input endpoint {endpoint} into a url, "
            "expected an absolute http(s) URL such as http://localhost:8123",
            component="clickhouse-endpoint",
        )
    try:
        parsed.port
    except ValueError as e:
        raise RetrievalPreconditionError(
            f"failed to decode input endpoint {endpoint} into a url, err: {e}",
            component="clickhouse-endpoint",
        )
    return endpoint.rstrip("/")


def _parse_type(value: Any) -> RecommendationType:
    try:
        return RecommendationType(value)
    except ValueError:
        raise ValidationError("type", "recommendation type should be 'initial' or 'subsequent'", value)


def _parse_option(value: Any) -> IsolationOption:
    try:
        return IsolationOption(value)
    except ValueError:
        raise ValidationError(
            "option",
            "option of network isolation preference should be anp-deny-applied or anp-deny-all or k8s-np",
            value,
        )


def _parse_non_negative_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(name, f"{name} should be an integer >= 0", value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ValidationError(name, f"{name} should be an integer >= 0", value)
    if not isinstance(value, int) or value < 0:
        raise ValidationError(name, f"{name} should be an integer >= 0", value)
    return value


def _parse_time(name: str, value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    flag = name.replace("_", "-")
    try:
        if not TIME_PATTERN.match(str(value)):
            raise ValueError(f"time data '{value}' does not match format '{TIME_FORMAT}'")
        return datetime.strptime(str(value), TIME_FORMAT)
    except ValueError as e:
        raise ValidationError(
            name,
            f"parsing {flag}: {e}, {flag} should be in 'YYYY-MM-DD hh:mm:ss' format, "
            "for example: 2006-01-02 15:04:05",
            value,
        )


def _parse_ns_allow_list(value: Any) -> Optional[Tuple[str, ...]]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValidationError(
                "ns_allow_list",
                f"parsing ns-allow-list: {e}, ns-allow-list should be a list of namespace string, "
                """for example: '["kube-system","flow-aggregator","flow-visibility"]'""",
                value,
            )
    if not isinstance(value, (list, tuple)) or not all(isinstance(ns, str) and ns for ns in value):
        raise ValidationError(
            "ns_allow_list", "ns-allow-list should be a list of non-empty namespace strings", value
        )
    return tuple(value)


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in _TRUE_STRINGS | _FALSE_STRINGS:
        return value.lower() in _TRUE_STRINGS
    raise ValidationError(name, f"{name} should be true or false", value)


def _parse_quantity(name: str, value: Any) -> str:
    if not isinstance(value, str) or not QUANTITY_PATTERN.match(value):
        raise ValidationError(name, f"{name.replace('_', '-')} should conform to the Kubernetes convention", value)
    return value

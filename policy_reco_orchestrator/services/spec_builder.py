"""
Job specification builder.

Turns a validated JobRequest into a SparkApplication description carrying a
freshly generated job ID, and decodes the job argument list back into
parameters.
"""

import json
import uuid
from typing import Any, Dict, List, Sequence

from ..models.job import JobRequest, JobSpec, IsolationOption, TIME_FORMAT
from ..utils.config import OrchestratorConfig
from ..utils.logger import get_logger


SPARK_API_GROUP = "sparkoperator.k8s.io"
SPARK_API_VERSION = "v1beta2"
SPARK_PLURAL = "sparkapplications"
SPARK_KIND = "SparkApplication"

JOB_NAME_PREFIX = "policy-reco-"

# Argument keys of the recommendation job, mapped to validator parameter names
ARGUMENT_KEYS = {
    "--type": "type",
    "--limit": "limit",
    "--option": "option",
    "--start_time": "start_time",
    "--end_time": "end_time",
    "--ns_allow_list": "ns_allow_list",
    "--rm_labels": "rm_labels",
    "--to_services": "to_services",
    "--id": "id",
}


def job_name(job_id: str) -> str:
    """Name of the SparkApplication resource for a job ID."""
    return JOB_NAME_PREFIX + job_id


def new_job_id() -> str:
    return str(uuid.uuid4())


def encode_job_arguments(request: JobRequest, job_id: str) -> List[str]:
    """Encode a request as the flat key/value argument list of the recommendation job."""
    args = [
        "--type", request.reco_type.value,
        "--limit", str(request.limit),
        "--option", str(request.option.code),
    ]
    if request.start_time is not None:
        args += ["--start_time", request.start_time.strftime(TIME_FORMAT)]
    if request.end_time is not None:
        args += ["--end_time", request.end_time.strftime(TIME_FORMAT)]
    if request.ns_allow_list is not None:
        args += ["--ns_allow_list", json.dumps(list(request.ns_allow_list))]
    args += [
        "--rm_labels", _format_bool(request.rm_labels),
        "--to_services", _format_bool(request.to_services),
        "--id", job_id,
    ]
    return args


def decode_job_arguments(args: Sequence[str]) -> Dict[str, Any]:
    """
    Decode a job argument list into validator parameters.

    Unknown keys are ignored. The numeric option code is mapped back to its
    option name and the job ID is returned under ``id``.
    """
    params: Dict[str, Any] = {}
    for key, value in zip(args[::2], args[1::2]):
        name = ARGUMENT_KEYS.get(key)
        if name is None:
            continue
        if name == "option":
            try:
                value = IsolationOption.from_code(int(value)).value
            except ValueError:
                pass
        params[name] = value
    return params


class SparkApplicationBuilder:
    """
    Builds SparkApplication specifications for policy recommendation jobs.

    Every call to build() generates a new job ID, so identical requests never
    share an ID.
    """

    def __init__(self, config: OrchestratorConfig):
        self.config = config
        self.logger = get_logger(__name__)

    def build(self, request: JobRequest) -> JobSpec:
        job_id = new_job_id()
        arguments = encode_job_arguments(request, job_id)
        name = job_name(job_id)

        body = {
            "apiVersion": f"{SPARK_API_GROUP}/{SPARK_API_VERSION}",
            "kind": SPARK_KIND,
            "metadata": {
                "name": name,
                "namespace": self.config.namespace,
            },
            "spec": {
                "type": "Python",
                "sparkVersion": self.config.spark_version,
                "mode": "cluster",
                "image": self.config.spark_image,
                "imagePullPolicy": self.config.spark_image_pull_policy,
                "mainApplicationFile": self.config.spark_app_file,
                "arguments": list(arguments),
                "driver": {
                    "coreRequest": request.resources.driver_core_request,
                    "memory": request.resources.driver_memory,
                    "labels": {"version": self.config.spark_version},
                    "envSecretKeyRefs": self._clickhouse_secret_refs(),
                    "serviceAccount": self.config.spark_service_account,
                },
                "executor": {
                    "coreRequest": request.resources.executor_core_request,
                    "memory": request.resources.executor_memory,
                    "labels": {"version": self.config.spark_version},
                    "envSecretKeyRefs": self._clickhouse_secret_refs(),
                    "instances": request.resources.executor_instances,
                },
            },
        }

        self.logger.debug(f"Built job spec {name}", extra={"job_id": job_id})

        return JobSpec(
            job_id=job_id,
            name=name,
            namespace=self.config.namespace,
            request=request,
            arguments=tuple(arguments),
            body=body,
        )

    def _clickhouse_secret_refs(self) -> Dict[str, Dict[str, str]]:
        return {
            "CH_USERNAME": {"name": self.config.clickhouse_secret, "key": "username"},
            "CH_PASSWORD": {"name": self.config.clickhouse_secret, "key": "password"},
        }


def _format_bool(value: bool) -> str:
    return "true" if value else "false"

"""
Job manager for policy recommendation Spark applications.

Submits SparkApplication custom resources to the Kubernetes control plane and
reads their state back by job ID.
"""

from typing import Any, Dict

from kubernetes import client
from kubernetes.client.rest import ApiException

from ..core.exceptions import JobSubmissionError, JobStatusError
from ..models.job import JobSpec, JobHandle, JobState, application_state
from ..utils.config import OrchestratorConfig
from ..utils.kube import TRANSPORT_ERRORS, find_running_pod
from ..utils.logger import get_logger
from .spec_builder import SPARK_API_GROUP, SPARK_API_VERSION, SPARK_PLURAL, job_name


class SparkApplicationManager:
    """
    Manages SparkApplication resources of policy recommendation jobs.

    Provides:
    - Spark operator readiness check before submission
    - Job submission
    - State lookup by job ID
    """

    def __init__(self, api_client: client.ApiClient, config: OrchestratorConfig):
        """
        Initialize the job manager.

        Args:
            api_client: Kubernetes API client
            config: Orchestrator configuration
        """
        self.config = config
        self.custom_api = client.CustomObjectsApi(api_client)
        self.core_api = client.CoreV1Api(api_client)
        self.logger = get_logger(__name__)

    def check_spark_operator(self) -> None:
        """
        Check that the Spark operator is running.

        Raises:
            JobSubmissionError: If no Spark operator pod is Running
        """
        try:
            pod_name = find_running_pod(self.core_api, self.config.namespace, self.config.spark_operator_selector)
        except ApiException as e:
            raise JobSubmissionError(
                f"error when checking the Spark operator Pod in namespace {self.config.namespace}: {e.reason}"
            )
        except TRANSPORT_ERRORS as e:
            raise JobSubmissionError(
                f"error when checking the Spark operator Pod in namespace {self.config.namespace}, "
                f"control plane unreachable: {e}"
            )
        if pod_name is None:
            raise JobSubmissionError(
                f"can't find a running Spark operator Pod in namespace {self.config.namespace}, "
                "please check the deployment of the Spark operator"
            )

    def submit(self, spec: JobSpec) -> JobHandle:
        """
        Create the SparkApplication described by a job spec.

        Returns:
            JobHandle reflecting the created resource

        Raises:
            JobSubmissionError: If the control plane rejects the resource or is unreachable
        """
        self.logger.info(f"Submitting policy recommendation job {spec.job_id}")
        try:
            response = self.custom_api.create_namespaced_custom_object(
                group=SPARK_API_GROUP,
                version=SPARK_API_VERSION,
                namespace=spec.namespace,
                plural=SPARK_PLURAL,
                body=spec.body,
            )
        except ApiException as e:
            raise JobSubmissionError(f"{e.status} {e.reason}: {_api_message(e)}", job_id=spec.job_id)
        except TRANSPORT_ERRORS as e:
            raise JobSubmissionError(f"control plane unreachable: {e}", job_id=spec.job_id)

        return JobHandle.from_response(spec.job_id, response)

    def get_application(self, job_id: str) -> Dict[str, Any]:
        """
        Read the SparkApplication resource of a job.

        Raises:
            JobStatusError: If the resource cannot be read
        """
        try:
            return self.custom_api.get_namespaced_custom_object(
                group=SPARK_API_GROUP,
                version=SPARK_API_VERSION,
                namespace=self.config.namespace,
                plural=SPARK_PLURAL,
                name=job_name(job_id),
            )
        except ApiException as e:
            if e.status == 404:
                raise JobStatusError(job_id, "policy recommendation job not found")
            raise JobStatusError(job_id, f"{e.status} {e.reason}: {_api_message(e)}")
        except TRANSPORT_ERRORS as e:
            raise JobStatusError(job_id, f"control plane unreachable: {e}")

    def get_state(self, job_id: str) -> JobState:
        """Query the current state of a job."""
        state = JobState.parse(application_state(self.get_application(job_id)).get("state"))
        self.logger.debug(f"Job {job_id} state: {state.value or 'NEW'}")
        return state


def _api_message(error: ApiException) -> str:
    body = error.body
    if isinstance(body, bytes):
        body = body.decode("utf-8", "replace")
    return str(body or "").strip()

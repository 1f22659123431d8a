"""
RecommendationOrchestrator that coordinates all services

Chains parameter validation, job spec construction, submission, status polling
and result retrieval for policy recommendation jobs. Every stage is blocking
and the first failing stage aborts the pipeline.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from kubernetes import client

from ..models.job import (
    JobRequest,
    JobHandle,
    JobState,
    JobStatusReport,
    application_state,
    application_arguments,
)
from ..reachability import select_reachability
from ..services.job_manager import SparkApplicationManager
from ..services.poller import StatusPoller
from ..services.result_fetcher import ResultFetcher
from ..services.spec_builder import SparkApplicationBuilder, decode_job_arguments
from ..services.validator import validate_request, validate_endpoint
from ..utils.config import OrchestratorConfig
from ..utils.kube import resolve_kubeconfig, create_api_client
from ..utils.logger import get_logger, LoggerContext


@dataclass
class RunResult:
    """Outcome of a run: the submitted job and, when waited for, its result."""

    handle: JobHandle
    result: Optional[str] = None

    @property
    def job_id(self) -> str:
        return self.handle.job_id


class RecommendationOrchestrator:
    """
    Main orchestrator for policy recommendation jobs.

    Provides a unified interface for:
    - Job submission with parameter validation
    - Waiting for job completion
    - Job status reporting
    - Result retrieval through direct or port-forwarded access to ClickHouse
    """

    def __init__(
        self,
        api_client: client.ApiClient,
        config: Optional[OrchestratorConfig] = None,
        kubeconfig: Optional[str] = None
    ):
        """
        Initialize the RecommendationOrchestrator.

        Args:
            api_client: Kubernetes API client, closed by close()
            config: Orchestrator configuration
            kubeconfig: Kubeconfig file, handed to kubectl for port forwarding
        """
        self.api_client = api_client
        self.config = config or OrchestratorConfig()
        self.kubeconfig = kubeconfig

        self.job_manager = SparkApplicationManager(api_client, self.config)
        self.builder = SparkApplicationBuilder(self.config)
        self.poller = StatusPoller(
            self.job_manager.get_state,
            interval=self.config.poll_interval,
            timeout=self.config.poll_timeout,
        )
        self.fetcher = ResultFetcher(self.job_manager.core_api, self.config)

        self.logger = get_logger(__name__)

    @classmethod
    def from_kubeconfig(
        cls,
        kubeconfig: Optional[str] = None,
        config: Optional[OrchestratorConfig] = None
    ) -> "RecommendationOrchestrator":
        """Create an orchestrator from a kubeconfig file or in-cluster configuration."""
        resolved = resolve_kubeconfig(kubeconfig)
        return cls(create_api_client(resolved), config=config, kubeconfig=resolved)

    def __enter__(self) -> "RecommendationOrchestrator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Release the Kubernetes API client."""
        self.api_client.close()

    def submit_job(self, params: Union[JobRequest, Mapping[str, Any]]) -> JobHandle:
        """
        Validate parameters and submit a new policy recommendation job.

        Args:
            params: Raw invocation parameters or an already validated JobRequest

        Returns:
            JobHandle of the created job
        """
        request = params if isinstance(params, JobRequest) else validate_request(params)

        self.job_manager.check_spark_operator()
        spec = self.builder.build(request)

        with LoggerContext(job_id=spec.job_id):
            handle = self.job_manager.submit(spec)
            self.logger.info(f"Created policy recommendation job {spec.name}", extra={
                "parameters": request.to_dict()
            })
        return handle

    def wait_for_completion(self, job_id: str) -> JobState:
        """Block until a job completes; raises on failure states and timeout."""
        with LoggerContext(job_id=job_id):
            return self.poller.wait_for_completion(job_id)

    def get_status(self, job_id: str) -> JobStatusReport:
        """Get the current status of a job."""
        application = self.job_manager.get_application(job_id)
        app_state = application_state(application)
        raw_state = app_state.get("state") or ""

        parameters = decode_job_arguments(application_arguments(application))
        parameters.pop("id", None)

        return JobStatusReport(
            job_id=job_id,
            state=JobState.parse(raw_state),
            raw_state=raw_state,
            error_message=app_state.get("errorMessage") or None,
            parameters=parameters,
        )

    def retrieve_result(
        self,
        job_id: str,
        endpoint: Optional[str] = None,
        use_cluster_ip: bool = False
    ) -> str:
        """
        Retrieve the result of a completed job.

        Args:
            job_id: Job ID
            endpoint: Optional ClickHouse HTTP endpoint used instead of in-cluster discovery
            use_cluster_ip: Connect to the ClickHouse Service ClusterIP instead of port forwarding

        Returns:
            The recommendation result, empty when none is stored
        """
        endpoint = validate_endpoint(endpoint)
        with LoggerContext(job_id=job_id):
            reachability = select_reachability(
                self.job_manager.core_api,
                self.config,
                use_cluster_ip=use_cluster_ip,
                endpoint=endpoint,
                kubeconfig=self.kubeconfig,
            )
            return self.fetcher.fetch(job_id, reachability)

    def run(
        self,
        params: Union[JobRequest, Mapping[str, Any]],
        wait: bool = False,
        endpoint: Optional[str] = None,
        use_cluster_ip: bool = False
    ) -> RunResult:
        """
        Run the whole pipeline for a new job.

        Without ``wait`` only submission happens; the job can later be checked
        and retrieved with its job ID. With ``wait`` the call blocks until the
        job completes and then retrieves its result.
        """
        request = params if isinstance(params, JobRequest) else validate_request(params)
        if wait:
            endpoint = validate_endpoint(endpoint)

        handle = self.submit_job(request)
        if not wait:
            return RunResult(handle=handle)

        self.wait_for_completion(handle.job_id)
        result = self.retrieve_result(handle.job_id, endpoint=endpoint, use_cluster_ip=use_cluster_ip)
        return RunResult(handle=handle, result=result)

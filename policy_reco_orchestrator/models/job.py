"""
Job-related data models for the Policy Recommendation Orchestrator

Defines the request, specification, handle and state structures that flow
through validation, submission, polling and retrieval.
"""

from enum import Enum
from datetime import datetime
from typing import Optional, Dict, Any, List, Tuple
from dataclasses import dataclass, field


TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_NS_ALLOW_LIST = ("kube-system", "flow-aggregator", "flow-visibility")


class RecommendationType(Enum):
    """Recommendation mode of a job."""
    INITIAL = "initial"
    SUBSEQUENT = "subsequent"


class IsolationOption(Enum):
    """Network isolation preference of the recommended policies."""
    ANP_DENY_APPLIED = "anp-deny-applied"
    ANP_DENY_ALL = "anp-deny-all"
    K8S_NP = "k8s-np"

    @property
    def code(self) -> int:
        """Numeric code understood by the recommendation job."""
        return ISOLATION_OPTION_CODES[self]

    @classmethod
    def from_code(cls, code: int) -> "IsolationOption":
        for option, option_code in ISOLATION_OPTION_CODES.items():
            if option_code == code:
                return option
        raise ValueError(f"unknown isolation option code {code}")


ISOLATION_OPTION_CODES = {
    IsolationOption.ANP_DENY_APPLIED: 1,
    IsolationOption.ANP_DENY_ALL: 2,
    IsolationOption.K8S_NP: 3,
}


class JobState(Enum):
    """Application state reported by the Spark operator."""
    NEW = ""
    SUBMITTED = "SUBMITTED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    SUBMISSION_FAILED = "SUBMISSION_FAILED"
    PENDING_RERUN = "PENDING_RERUN"
    INVALIDATING = "INVALIDATING"
    SUCCEEDING = "SUCCEEDING"
    FAILING = "FAILING"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "JobState":
        """Map a raw state string to a JobState; unrecognized values are UNKNOWN."""
        try:
            return cls(raw or "")
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_success(self) -> bool:
        return self is JobState.COMPLETED

    @property
    def is_failure(self) -> bool:
        return self in FAILURE_STATES

    @property
    def is_terminal(self) -> bool:
        return self.is_success or self.is_failure


FAILURE_STATES = frozenset({
    JobState.FAILED,
    JobState.SUBMISSION_FAILED,
    JobState.FAILING,
    JobState.INVALIDATING,
})


@dataclass(frozen=True)
class SparkResources:
    """Resource sizing of the Spark driver and executors."""

    executor_instances: int = 1
    driver_core_request: str = "200m"
    driver_memory: str = "512M"
    executor_core_request: str = "200m"
    executor_memory: str = "512M"


@dataclass(frozen=True)
class JobRequest:
    """Validated parameters of a policy recommendation job.

    Instances are produced by ``services.validator.validate_request``; every
    field has already been checked when one exists.
    """

    reco_type: RecommendationType = RecommendationType.INITIAL
    limit: int = 0
    option: IsolationOption = IsolationOption.ANP_DENY_APPLIED
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    ns_allow_list: Optional[Tuple[str, ...]] = None
    rm_labels: bool = True
    to_services: bool = True
    resources: SparkResources = field(default_factory=SparkResources)

    @property
    def effective_ns_allow_list(self) -> Tuple[str, ...]:
        """Namespace allow-list the job will apply, falling back to the default set."""
        if self.ns_allow_list is None:
            return DEFAULT_NS_ALLOW_LIST
        return self.ns_allow_list

    def to_dict(self) -> Dict[str, Any]:
        """Convert request to dictionary for display and logging."""
        return {
            "type": self.reco_type.value,
            "limit": self.limit,
            "option": self.option.value,
            "start_time": self.start_time.strftime(TIME_FORMAT) if self.start_time else None,
            "end_time": self.end_time.strftime(TIME_FORMAT) if self.end_time else None,
            "ns_allow_list": list(self.effective_ns_allow_list),
            "rm_labels": self.rm_labels,
            "to_services": self.to_services,
            "executor_instances": self.resources.executor_instances,
            "driver_core_request": self.resources.driver_core_request,
            "driver_memory": self.resources.driver_memory,
            "executor_core_request": self.resources.executor_core_request,
            "executor_memory": self.resources.executor_memory,
        }


@dataclass(frozen=True)
class JobSpec:
    """Declarative description of a policy recommendation Spark application."""

    job_id: str
    name: str
    namespace: str
    request: JobRequest
    arguments: Tuple[str, ...]
    body: Dict[str, Any] = field(compare=False, repr=False)


@dataclass(frozen=True)
class JobHandle:
    """Control plane acknowledgement of a submitted job."""

    job_id: str
    name: str
    namespace: str
    state: JobState = JobState.NEW

    @classmethod
    def from_response(cls, job_id: str, response: Dict[str, Any]) -> "JobHandle":
        metadata = response.get("metadata") or {}
        return cls(
            job_id=job_id,
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            state=JobState.parse(application_state(response).get("state")),
        )


@dataclass
class JobStatusReport:
    """Current status of a job as reported by the control plane."""

    job_id: str
    state: JobState
    raw_state: str
    error_message: Optional[str] = None
    parameters: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "state": self.raw_state,
            "error_message": self.error_message,
            "parameters": self.parameters,
        }


def application_state(resource: Dict[str, Any]) -> Dict[str, Any]:
    """Extract ``status.applicationState`` from a SparkApplication resource."""
    status = resource.get("status") or {}
    return status.get("applicationState") or {}


def application_arguments(resource: Dict[str, Any]) -> List[str]:
    """Extract ``spec.arguments`` from a SparkApplication resource."""
    spec = resource.get("spec") or {}
    return list(spec.get("arguments") or [])

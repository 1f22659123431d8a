"""
Exception classes for the Policy Recommendation Orchestrator

Provides a hierarchy of exceptions for the different stages of a policy
recommendation job: parameter validation, submission, polling and result
retrieval. Every exception carries the exit code the CLI terminates with.
"""

from typing import Optional, Dict, Any


class PolicyRecoError(Exception):
    """Base exception for all policy recommendation orchestrator errors."""

    exit_code = 1

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details
        }


class ConfigurationError(PolicyRecoError):
    """Raised when there's an error in configuration or cluster access setup."""

    def __init__(self, config_key: str, message: str):
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            error_code="CONFIGURATION_ERROR",
            details={"config_key": config_key}
        )


class ValidationError(PolicyRecoError):
    """Raised when an invocation parameter fails validation."""

    exit_code = 2

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for {field}: {message}",
            error_code="VALIDATION_ERROR",
            details={"field": field, "value": str(value) if value is not None else None}
        )


class JobSubmissionError(PolicyRecoError):
    """Raised when the control plane rejects or cannot receive a job."""

    exit_code = 3

    def __init__(self, message: str, job_id: Optional[str] = None):
        super().__init__(
            f"Job submission failed: {message}",
            error_code="JOB_SUBMISSION_ERROR",
            details={"job_id": job_id}
        )


class JobStatusError(PolicyRecoError):
    """Raised when the state of a submitted job cannot be read."""

    exit_code = 3

    def __init__(self, job_id: str, message: str):
        super().__init__(
            f"Failed to get status of job {job_id}: {message}",
            error_code="JOB_STATUS_ERROR",
            details={"job_id": job_id}
        )


class JobFailedError(PolicyRecoError):
    """Raised when the control plane reports a job in a failure state."""

    exit_code = 4

    def __init__(self, job_id: str, state: str):
        super().__init__(
            f"policy recommendation job {job_id} failed, state: {state}",
            error_code="JOB_FAILED",
            details={"job_id": job_id, "state": state}
        )
        self.job_id = job_id
        self.state = state


class JobTimeoutError(PolicyRecoError):
    """Raised when a job does not reach a terminal state in time.

    The job itself is left running and may still complete later.
    """

    exit_code = 5

    def __init__(self, job_id: str, timeout_seconds: float, last_state: Optional[str] = None):
        super().__init__(
            f"policy recommendation job {job_id} did not finish within {timeout_seconds:g} seconds"
            + (f", last state: {last_state}" if last_state else ""),
            error_code="JOB_TIMEOUT",
            details={"job_id": job_id, "timeout_seconds": timeout_seconds, "last_state": last_state}
        )
        self.job_id = job_id


class RetrievalPreconditionError(PolicyRecoError):
    """Raised when the backing store cannot be reached before querying."""

    exit_code = 6

    def __init__(self, message: str, component: Optional[str] = None):
        super().__init__(
            message,
            error_code="RETRIEVAL_PRECONDITION",
            details={"component": component}
        )


class RetrievalQueryError(PolicyRecoError):
    """Raised when querying the backing store fails."""

    exit_code = 7

    def __init__(self, job_id: str, message: str):
        super().__init__(
            f"Failed to retrieve result of job {job_id}: {message}",
            error_code="RETRIEVAL_QUERY_ERROR",
            details={"job_id": job_id}
        )


class ResultDeliveryError(PolicyRecoError):
    """Raised when a retrieved result cannot be written to its destination."""

    exit_code = 8

    def __init__(self, path: str, message: str):
        super().__init__(
            f"Failed to write result to {path}: {message}",
            error_code="RESULT_DELIVERY_ERROR",
            details={"path": path}
        )

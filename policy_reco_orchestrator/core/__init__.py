"""
Core package for the Policy Recommendation Orchestrator

Contains the exception hierarchy and the orchestrator module. The orchestrator
itself is exported from the top-level package.
"""

from .exceptions import (
    PolicyRecoError,
    ConfigurationError,
    ValidationError,
    JobSubmissionError,
    JobStatusError,
    JobFailedError,
    JobTimeoutError,
    RetrievalPreconditionError,
    RetrievalQueryError,
    ResultDeliveryError
)

__all__ = [
    "PolicyRecoError",
    "ConfigurationError",
    "ValidationError",
    "JobSubmissionError",
    "JobStatusError",
    "JobFailedError",
    "JobTimeoutError",
    "RetrievalPreconditionError",
    "RetrievalQueryError",
    "ResultDeliveryError"
]

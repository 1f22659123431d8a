"""
Policy Recommendation Orchestrator

Drives network policy recommendation Spark jobs on a Kubernetes cluster from
the command line: validates job parameters, submits a SparkApplication to the
Spark operator, waits for it to finish and retrieves the recommended policies
from ClickHouse.

Usage:
    from policy_reco_orchestrator import RecommendationOrchestrator

    with RecommendationOrchestrator.from_kubeconfig() as orchestrator:
        outcome = orchestrator.run(
            {"type": "initial", "option": "anp-deny-applied", "limit": 10000},
            wait=True,
        )
        print(outcome.result)
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

# Core orchestrator
from .core.orchestrator import RecommendationOrchestrator, RunResult

# Data models
from .models.job import (
    JobRequest,
    JobSpec,
    JobHandle,
    JobState,
    JobStatusReport,
    RecommendationType,
    IsolationOption,
    SparkResources
)

# Utilities
from .utils.config import OrchestratorConfig, load_config
from .utils.logger import setup_logger, get_logger

# Exceptions
from .core.exceptions import (
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
    # Core
    "RecommendationOrchestrator",
    "RunResult",

    # Models
    "JobRequest",
    "JobSpec",
    "JobHandle",
    "JobState",
    "JobStatusReport",
    "RecommendationType",
    "IsolationOption",
    "SparkResources",

    # Utilities
    "OrchestratorConfig",
    "load_config",
    "setup_logger",
    "get_logger",

    # Exceptions
    "PolicyRecoError",
    "ConfigurationError",
    "ValidationError",
    "JobSubmissionError",
    "JobStatusError",
    "JobFailedError",
    "JobTimeoutError",
    "RetrievalPreconditionError",
    "RetrievalQueryError",
    "ResultDeliveryError",

    # Package metadata
    "__version__",
    "__license__"
]

# Package-level configuration
import logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

"""
Services package for the Policy Recommendation Orchestrator

Contains the stages of the job lifecycle.
"""

from .validator import validate_request, validate_endpoint
from .spec_builder import SparkApplicationBuilder, encode_job_arguments, decode_job_arguments
from .job_manager import SparkApplicationManager
from .poller import StatusPoller
from .result_fetcher import ResultFetcher, deliver_result

__all__ = [
    "validate_request",
    "validate_endpoint",
    "SparkApplicationBuilder",
    "encode_job_arguments",
    "decode_job_arguments",
    "SparkApplicationManager",
    "StatusPoller",
    "ResultFetcher",
    "deliver_result"
]

"""
Data models for the Policy Recommendation Orchestrator

This module contains the data models that flow through the job lifecycle:
requests, specifications, handles, states and status reports.
"""

from .job import (
    RecommendationType,
    IsolationOption,
    ISOLATION_OPTION_CODES,
    JobState,
    FAILURE_STATES,
    SparkResources,
    JobRequest,
    JobSpec,
    JobHandle,
    JobStatusReport,
    DEFAULT_NS_ALLOW_LIST,
    TIME_FORMAT
)

__all__ = [
    "RecommendationType",
    "IsolationOption",
    "ISOLATION_OPTION_CODES",
    "JobState",
    "FAILURE_STATES",
    "SparkResources",
    "JobRequest",
    "JobSpec",
    "JobHandle",
    "JobStatusReport",
    "DEFAULT_NS_ALLOW_LIST",
    "TIME_FORMAT"
]

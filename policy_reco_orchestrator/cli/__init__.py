"""
CLI package for the Policy Recommendation Orchestrator

Provides the command-line interface for running, checking and retrieving
policy recommendation jobs.
"""

from .main import main, cli

__all__ = ["main", "cli"]

"""
Setup script for the Policy Recommendation Orchestrator

A command-line orchestrator that runs network policy recommendation Spark jobs
on Kubernetes, waits for them to finish and retrieves their results from
ClickHouse.
"""

from setuptools import setup, find_packages
import pathlib

here = pathlib.Path(__file__).parent.resolve()

# Get the long description from the README file
try:
    long_description = (here / "README.md").read_text(encoding="utf-8")
except FileNotFoundError:
    long_description = """
    Policy Recommendation Orchestrator

    Runs network policy recommendation Spark jobs through the Spark operator,
    polls them until they finish and retrieves the recommended policies from
    ClickHouse, either through port forwarding or the in-cluster Service address.
    """

setup(
    name="policy-reco-orchestrator",
    version="1.0.0",
    description="Command-line orchestrator for network policy recommendation Spark jobs on Kubernetes",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Policy Recommendation Orchestrator Team",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Distributed Computing",
        "Topic :: System :: Systems Administration",
    ],
    keywords="kubernetes, spark, network policy, recommendation, clickhouse",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        # Core dependencies
        "click>=8.0.0",

        # Kubernetes control plane
        "kubernetes>=27.2.0",
        "urllib3>=1.26.0",

        # ClickHouse HTTP interface
        "httpx>=0.24.0",

        # Configuration
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=22.0.0",
            "isort>=5.10.0",
            "mypy>=1.0.0",
            "coverage>=6.0.0",
            "flake8>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "policy-reco=policy_reco_orchestrator.cli.main:main",
        ],
    },
)

"""
Result fetcher for completed policy recommendation jobs.

Checks that ClickHouse is serving, queries the stored recommendation of a job
through a reachability strategy and delivers it to exactly one sink.
"""

import sys
from pathlib import Path
from typing import Callable, Optional, TextIO, Union

from kubernetes import client

from ..core.exceptions import ResultDeliveryError
from ..reachability.base import BaseReachability
from ..utils.clickhouse import ClickHouseClient
from ..utils.config import OrchestratorConfig
from ..utils.kube import require_running_pod, read_secret_credentials
from ..utils.logger import get_logger


class ResultFetcher:
    """Fetches recommendation results from ClickHouse."""

    def __init__(
        self,
        core_api: client.CoreV1Api,
        config: OrchestratorConfig,
        client_factory: Callable[..., ClickHouseClient] = ClickHouseClient
    ):
        self.core_api = core_api
        self.config = config
        self.client_factory = client_factory
        self.logger = get_logger(__name__)

    def check_ready(self) -> str:
        """Return the name of the Running ClickHouse Pod or raise RetrievalPreconditionError."""
        return require_running_pod(
            self.core_api, self.config.namespace, self.config.clickhouse_selector, "ClickHouse"
        )

    def fetch(self, job_id: str, reachability: BaseReachability) -> str:
        """
        Retrieve the recommendation result of a job.

        Args:
            job_id: ID of a completed job
            reachability: Strategy providing the ClickHouse address

        Returns:
            The stored result, empty when the job has none

        Raises:
            RetrievalPreconditionError: If ClickHouse is not ready or unreachable
            RetrievalQueryError: If the query fails
        """
        self.check_ready()
        username, password = read_secret_credentials(
            self.core_api, self.config.namespace, self.config.clickhouse_secret
        )

        self.logger.info(f"Retrieving result of policy recommendation job {job_id} via {reachability.mode}")
        with reachability as endpoint:
            with self.client_factory(endpoint, username, password, timeout=self.config.query_timeout) as ch_client:
                result = ch_client.get_recommendation(job_id)

        if not result:
            self.logger.warning(f"No recommendation result stored for job {job_id}")
        return result


def deliver_result(
    result: str,
    file_path: Optional[Union[str, Path]] = None,
    out: Optional[TextIO] = None
) -> None:
    """
    Write a result to exactly one sink.

    With a file path the file is overwritten with exactly the result and
    nothing is written to ``out``. Without one the result is written to
    ``out`` (stdout by default) unless it is empty.

    Raises:
        ResultDeliveryError: If the file cannot be written
    """
    if file_path:
        try:
            with open(file_path, 'w', encoding='utf-8', newline='') as f:
                f.write(result)
        except OSError as e:
            raise ResultDeliveryError(str(file_path), e.strerror or str(e))
        return

    if result:
        stream = out if out is not None else sys.stdout
        stream.write(result)
        stream.flush()

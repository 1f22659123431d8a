"""
ClickHouse utilities for the Policy Recommendation Orchestrator

Queries recommendation results through the ClickHouse HTTP interface.
"""

from typing import Optional

import httpx

from ..core.exceptions import RetrievalQueryError
from .logger import get_logger


RECOMMENDATION_QUERY = (
    "SELECT yamls FROM recommendations WHERE id = {id:String} LIMIT 1 FORMAT JSON"
)


class ClickHouseClient:
    """
    Minimal ClickHouse HTTP client.

    Supports use as a context manager so the underlying connection pool is
    always released.
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: HTTP endpoint of the ClickHouse server
            username: ClickHouse user
            password: ClickHouse password
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.base_url = base_url
        self._client = httpx.Client(
            base_url=base_url,
            auth=(username, password),
            timeout=timeout,
            transport=transport,
        )
        self.logger = get_logger(__name__)

    def __enter__(self) -> "ClickHouseClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_recommendation(self, job_id: str) -> str:
        """
        Fetch the recommendation result of a job.

        Returns:
            The stored result, or an empty string when the job has no result row

        Raises:
            RetrievalQueryError: On connection, HTTP or decoding failures
        """
        self.logger.debug(f"Querying recommendation result from {self.base_url}")
        try:
            response = self._client.post(
                "/",
                params={"param_id": job_id},
                content=RECOMMENDATION_QUERY,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise RetrievalQueryError(
                job_id,
                f"ClickHouse returned HTTP {e.response.status_code}: {e.response.text.strip()}",
            )
        except httpx.HTTPError as e:
            raise RetrievalQueryError(job_id, f"failed to query ClickHouse at {self.base_url}: {e}")
        except ValueError as e:
            raise RetrievalQueryError(job_id, f"failed to decode ClickHouse response: {e}")

        if not isinstance(payload, dict) or not isinstance(payload.get("data") or [], list):
            raise RetrievalQueryError(job_id, "unexpected ClickHouse response, expected a JSON object with a data list")

        rows = payload.get("data") or []
        if not rows:
            return ""
        row = rows[0]
        if not isinstance(row, dict):
            raise RetrievalQueryError(job_id, "unexpected ClickHouse response row")
        return row.get("yamls") or ""

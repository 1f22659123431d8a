"""
Status poller for submitted policy recommendation jobs.

Polls the job state at a fixed interval until the job reaches a terminal state
or the timeout elapses. There is no backoff.
"""

import time
from typing import Callable

from ..core.exceptions import JobFailedError, JobTimeoutError
from ..models.job import JobState
from ..utils.logger import get_logger


class StatusPoller:
    """
    Fixed-interval polling loop over a job's state.

    The loop keeps no state beyond its own start time, so an interruption
    (KeyboardInterrupt raised from sleep) leaves nothing to clean up.
    """

    def __init__(
        self,
        get_state: Callable[[str], JobState],
        interval: float = 5.0,
        timeout: float = 3600.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the poller.

        Args:
            get_state: Callable returning the current JobState of a job ID
            interval: Seconds between two state queries
            timeout: Seconds after which a non-terminal job is reported as timed out
            sleep: Sleep function
            clock: Monotonic clock
        """
        self.get_state = get_state
        self.interval = interval
        self.timeout = timeout
        self._sleep = sleep
        self._clock = clock
        self.logger = get_logger(__name__)

    def wait_for_completion(self, job_id: str) -> JobState:
        """
        Block until a job completes.

        Returns:
            JobState.COMPLETED

        Raises:
            JobFailedError: If the job reaches a failure state
            JobTimeoutError: If no terminal state is reached within the timeout
        """
        started = self._clock()

        while True:
            state = self.get_state(job_id)

            if state.is_success:
                self.logger.info(f"Policy recommendation job {job_id} completed")
                return state

            if state.is_failure:
                raise JobFailedError(job_id, state.value)

            elapsed = self._clock() - started
            if elapsed >= self.timeout:
                raise JobTimeoutError(job_id, self.timeout, last_state=state.value or None)

            self.logger.debug(
                f"Policy recommendation job {job_id} is {state.value or 'NEW'}, "
                f"checking again in {self.interval:g}s"
            )
            self._sleep(self.interval)

"""
Base reachability interface.

Defines how the result fetcher obtains an address of the ClickHouse server,
independent of the network path used to reach it.
"""

from abc import ABC, abstractmethod
from typing import Optional


class BaseReachability(ABC):
    """
    Abstract base class for ClickHouse reachability strategies.

    A strategy is used as a context manager: entering it opens the network
    path and returns the base URL, leaving it releases whatever was opened,
    on every exit path.
    """

    def __init__(self):
        self._endpoint: Optional[str] = None

    @abstractmethod
    def open(self) -> str:
        """
        Open the network path to ClickHouse.

        Returns:
            Base URL of the ClickHouse HTTP interface
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the network path. Safe to call more than once."""
        pass

    def __enter__(self) -> str:
        try:
            self._endpoint = self.open()
        except BaseException:
            self.close()
            raise
        return self._endpoint

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._endpoint = None
        self.close()

    @property
    def endpoint(self) -> Optional[str]:
        """Base URL while the path is open."""
        return self._endpoint

    @property
    def mode(self) -> str:
        """Name of this reachability mode."""
        return self.__class__.__name__

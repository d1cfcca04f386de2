"""Sink plugin interface.

Sinks consume metrics snapshots. Each sink owns its private resources and
has its own initialize/process/cleanup lifecycle, driven by the plugin
registry.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional
from sysmon.core.models import MetricsSnapshot


class ISinkPlugin(ABC):
    """Interface for metrics sinks (console, file, remote API, ...)."""

    #: Human-readable name used for diagnostics only (not a lookup key)
    name: str = "Unnamed Plugin"

    @abstractmethod
    async def initialize(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Initialize the plugin (called once at startup).

        Args:
            stop_event: Shared stop signal, set when shutdown is requested
        """
        pass

    @abstractmethod
    async def process(
        self, snapshot: MetricsSnapshot, stop_event: Optional[asyncio.Event] = None
    ) -> None:
        """Handle a new snapshot. The snapshot must not be modified.

        Args:
            snapshot: The collected metrics
            stop_event: Shared stop signal
        """
        pass

    @abstractmethod
    async def cleanup(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Release plugin resources (called at shutdown).

        Args:
            stop_event: Shared stop signal
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"

"""Metrics provider interface for abstraction.

This module defines the provider interface that is implemented once per
supported host platform.
"""

from abc import ABC, abstractmethod
from sysmon.core.models import MetricsSnapshot


class IMetricsProvider(ABC):
    """Interface for host metrics providers."""

    @abstractmethod
    async def sample(self) -> MetricsSnapshot:
        """Take one snapshot of host resource usage.

        Failing metric families are reported as zeros. The call must
        complete or fail within a bounded time.

        Returns:
            Metrics snapshot

        Raises:
            SamplingError: If no metric could be determined
        """
        pass

"""Platform-specific metrics providers and the resolver that picks one."""

import logging
import sys
from typing import Optional

from sysmon.core.exceptions import UnsupportedPlatformError
from sysmon.core.provider import IMetricsProvider
from sysmon.providers.base import PsutilMetricsProvider
from sysmon.providers.posix import PosixMetricsProvider
from sysmon.providers.windows import WindowsMetricsProvider

logger = logging.getLogger(__name__)

# sys.platform prefix -> provider class
PROVIDERS: dict[str, type[PsutilMetricsProvider]] = {
    "win32": WindowsMetricsProvider,
    "cygwin": WindowsMetricsProvider,
    "linux": PosixMetricsProvider,
    "darwin": PosixMetricsProvider,
}


def resolve_provider(platform: Optional[str] = None, **options) -> IMetricsProvider:
    """Select the metrics provider for the running host.

    Args:
        platform: Platform identifier (defaults to ``sys.platform``)
        **options: Passed to the provider constructor (e.g. ``disk_path``)

    Returns:
        Provider instance for the host

    Raises:
        UnsupportedPlatformError: If no provider matches the platform
    """
    platform = platform or sys.platform
    for prefix, provider_cls in PROVIDERS.items():
        if platform.startswith(prefix):
            logger.info(f"Using {provider_cls.__name__} for platform '{platform}'")
            return provider_cls(**options)
    raise UnsupportedPlatformError(platform)


__all__ = [
    "PsutilMetricsProvider",
    "PosixMetricsProvider",
    "WindowsMetricsProvider",
    "PROVIDERS",
    "resolve_provider",
]

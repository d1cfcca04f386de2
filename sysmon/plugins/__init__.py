"""Built-in sink plugins."""

from typing import List

from sysmon.core.config import Settings
from sysmon.core.plugin import ISinkPlugin
from sysmon.plugins.api_publisher import ApiPublisherPlugin
from sysmon.plugins.console import ConsoleOutputPlugin
from sysmon.plugins.file_logger import FileLoggerPlugin


def build_plugins(settings: Settings) -> List[ISinkPlugin]:
    """Create the sinks enabled in settings, in registration order."""
    plugins: List[ISinkPlugin] = []
    if settings.enable_console_output:
        plugins.append(ConsoleOutputPlugin())
    if settings.enable_file_logging:
        plugins.append(FileLoggerPlugin(settings.log_file_path))
    if settings.enable_api_publisher:
        plugins.append(ApiPublisherPlugin(settings.api_endpoint, timeout=settings.api_timeout_seconds))
    return plugins


__all__ = [
    "ApiPublisherPlugin",
    "ConsoleOutputPlugin",
    "FileLoggerPlugin",
    "build_plugins",
]

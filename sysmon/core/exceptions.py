"""Exception hierarchy for the system monitor."""


class SysmonError(Exception):
    """Base class for all system monitor errors."""


class UnsupportedPlatformError(SysmonError):
    """Raised when no metrics provider matches the running host."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"No metrics provider available for platform '{platform}'")


class SamplingError(SysmonError):
    """Raised when a provider cannot determine any metric."""


class SchedulerStateError(SysmonError):
    """Raised on an invalid scheduler state transition."""


class RegistryError(SysmonError):
    """Raised on invalid plugin registry usage."""

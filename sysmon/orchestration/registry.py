"""Plugin registry.

Holds the registered sinks and fans each lifecycle call out to all of them
concurrently. A plugin failure is logged and recorded, never propagated, and
never prevents the other plugins from running.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterator, List, Optional

from sysmon.core.exceptions import RegistryError
from sysmon.core.models import MetricsSnapshot
from sysmon.core.plugin import ISinkPlugin

logger = logging.getLogger(__name__)


class PluginPhase(str, Enum):
    """Plugin lifecycle phase."""

    INITIALIZE = "initialize"
    PROCESS = "process"
    CLEANUP = "cleanup"


@dataclass(frozen=True)
class PluginOutcome:
    """Result of one plugin invocation in a fan-out."""

    plugin_name: str
    phase: PluginPhase
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PluginRegistry:
    """Manages and orchestrates sink plugins."""

    def __init__(self) -> None:
        self._plugins: List[ISinkPlugin] = []
        self._initialized = False

    def register(self, plugin: ISinkPlugin) -> None:
        """Register a plugin. Must be called before initialize_all.

        Args:
            plugin: Plugin to register

        Raises:
            ValueError: If plugin is None
            RegistryError: If plugins were already initialized
        """
        if plugin is None:
            raise ValueError("plugin must not be None")
        if self._initialized:
            raise RegistryError(f"Cannot register {plugin.name!r} after plugins were initialized")

        self._plugins.append(plugin)
        logger.info(f"Registered plugin: {plugin.name}", extra={"plugin": plugin.name})

    @property
    def plugins(self) -> List[ISinkPlugin]:
        return list(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[ISinkPlugin]:
        return iter(list(self._plugins))

    async def initialize_all(self, stop_event: Optional[asyncio.Event] = None) -> List[PluginOutcome]:
        """Initialize every plugin concurrently (best effort per plugin)."""
        self._initialized = True
        logger.info(f"Initializing {len(self._plugins)} plugins")
        return await self._fan_out(
            PluginPhase.INITIALIZE,
            lambda plugin: plugin.initialize(stop_event),
        )

    async def dispatch_all(
        self, snapshot: MetricsSnapshot, stop_event: Optional[asyncio.Event] = None
    ) -> List[PluginOutcome]:
        """Deliver one snapshot to every plugin concurrently.

        Args:
            snapshot: Snapshot shared read-only by all plugins
            stop_event: Shared stop signal

        Returns:
            One outcome per registered plugin

        Raises:
            ValueError: If snapshot is None
        """
        if snapshot is None:
            raise ValueError("snapshot must not be None")
        return await self._fan_out(
            PluginPhase.PROCESS,
            lambda plugin: plugin.process(snapshot, stop_event),
        )

    async def cleanup_all(self, stop_event: Optional[asyncio.Event] = None) -> List[PluginOutcome]:
        """Clean up every plugin concurrently (best effort per plugin)."""
        logger.info(f"Cleaning up {len(self._plugins)} plugins")
        return await self._fan_out(
            PluginPhase.CLEANUP,
            lambda plugin: plugin.cleanup(stop_event),
        )

    async def _fan_out(
        self,
        phase: PluginPhase,
        call: Callable[[ISinkPlugin], Awaitable[None]],
    ) -> List[PluginOutcome]:
        # A plugin raising CancelledError by itself is a plugin failure;
        # cancelling the caller still cancels every call and propagates.
        plugins = list(self._plugins)
        results = await asyncio.gather(
            *(self._guarded(plugin, phase, call) for plugin in plugins),
            return_exceptions=True,
        )

        outcomes: List[PluginOutcome] = []
        for plugin, result in zip(plugins, results):
            if isinstance(result, PluginOutcome):
                outcomes.append(result)
            elif isinstance(result, asyncio.CancelledError):
                outcomes.append(self._failed(plugin, phase, result))
            else:
                raise result
        return outcomes

    async def _guarded(
        self,
        plugin: ISinkPlugin,
        phase: PluginPhase,
        call: Callable[[ISinkPlugin], Awaitable[None]],
    ) -> PluginOutcome:
        try:
            await call(plugin)
        except Exception as e:
            return self._failed(plugin, phase, e)

        if phase is not PluginPhase.PROCESS:
            logger.info(f"Successfully completed {phase.value} for plugin: {plugin.name}", extra={"plugin": plugin.name})
        return PluginOutcome(plugin_name=plugin.name, phase=phase)

    @staticmethod
    def _failed(plugin: ISinkPlugin, phase: PluginPhase, error: BaseException) -> PluginOutcome:
        if phase is PluginPhase.PROCESS:
            message = f"Plugin {plugin.name} failed to process metrics: {error!r}"
        else:
            message = f"Failed to {phase.value} plugin: {plugin.name}: {error!r}"
        logger.error(message, exc_info=error, extra={"plugin": plugin.name})
        return PluginOutcome(plugin_name=plugin.name, phase=phase, error=error)

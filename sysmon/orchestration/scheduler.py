"""Monitoring scheduler.

This module implements the sample -> dispatch -> wait loop and the
scheduler lifecycle:

    CREATED -> STARTING -> RUNNING -> STOPPING -> STOPPED

STOPPED is terminal. Stopping never interrupts an in-flight tick; the stop
signal is observed at the top of each iteration and during the interval wait.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from sysmon.core.exceptions import SchedulerStateError
from sysmon.core.models import MetricsSnapshot
from sysmon.core.provider import IMetricsProvider
from sysmon.orchestration.registry import PluginRegistry

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    """Scheduler lifecycle state."""

    CREATED = "created"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class MonitoringScheduler:
    """Drives periodic sampling and plugin dispatch."""

    def __init__(
        self,
        provider: IMetricsProvider,
        registry: PluginRegistry,
        interval_seconds: float,
    ):
        """Initialize scheduler.

        Args:
            provider: Metrics provider for the host
            registry: Registry holding the sink plugins
            interval_seconds: Wait between the end of one tick and the next sample

        Raises:
            ValueError: If a dependency is missing or the interval is not positive
        """
        if provider is None:
            raise ValueError("provider must not be None")
        if registry is None:
            raise ValueError("registry must not be None")
        if interval_seconds is None or interval_seconds <= 0:
            raise ValueError("Interval must be greater than zero")

        self.provider = provider
        self.registry = registry
        self.interval_seconds = float(interval_seconds)

        self._state = SchedulerState.CREATED
        self._stop_event = asyncio.Event()
        self._loop_task: Optional[asyncio.Task] = None
        self._lifecycle_lock = asyncio.Lock()

        # Health counters
        self.tick_count = 0
        self.failed_samples = 0
        self.last_snapshot: Optional[MetricsSnapshot] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        """True while the sampling loop is active."""
        return (
            self._state is SchedulerState.RUNNING
            and self._loop_task is not None
            and not self._loop_task.done()
        )

    @property
    def stop_event(self) -> asyncio.Event:
        return self._stop_event

    async def start(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Initialize all plugins and schedule the sampling loop.

        Returns as soon as the loop task is scheduled.

        Args:
            stop_event: Optional external stop signal shared with the loop

        Raises:
            SchedulerStateError: If the scheduler was already started
        """
        async with self._lifecycle_lock:
            if self._state is not SchedulerState.CREATED:
                raise SchedulerStateError(f"Cannot start scheduler in state '{self._state.value}'")

            if stop_event is not None:
                if self._stop_event.is_set():
                    stop_event.set()
                self._stop_event = stop_event
            self._state = SchedulerState.STARTING
            logger.info("Starting System Monitor Service")

            try:
                await self.registry.initialize_all(self._stop_event)
            except Exception as e:
                logger.error(f"Failed to start System Monitor Service: {e}", exc_info=e)
                await self._shutdown(asyncio.Event())
                raise

            self._state = SchedulerState.RUNNING
            self._loop_task = asyncio.create_task(self._run_loop(), name="sysmon-monitoring-loop")
            logger.info("System Monitor Service started successfully")

    async def stop(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Signal the loop to exit, wait for it, then clean up all plugins.

        Always ends in STOPPED. Safe to call more than once and before start.

        Args:
            stop_event: Signal handed to plugin cleanup, letting the caller
                bound how long cleanup may take. A fresh, unset event when
                omitted; the loop's own stop signal is never reused here.
        """
        # Set before taking the lock so a start() still initializing
        # plugins that wait on the signal is released.
        self._stop_event.set()

        async with self._lifecycle_lock:
            if self._state is SchedulerState.STOPPED:
                return

            logger.info("Stopping System Monitor Service")
            # start() may have swapped in an external event meanwhile
            self._stop_event.set()

            if self._loop_task is not None:
                # asyncio.wait neither cancels the task nor raises its error
                await asyncio.wait({self._loop_task})
                if not self._loop_task.cancelled() and self._loop_task.exception() is not None:
                    logger.warning("Monitoring loop ended with an error; cleaning up plugins anyway")

            await self._shutdown(stop_event if stop_event is not None else asyncio.Event())

    async def wait(self) -> None:
        """Block until the sampling loop exits.

        Raises:
            Exception: The fatal error that terminated the loop, if any
        """
        if self._loop_task is None:
            return
        # Shielded so a cancelled caller never interrupts a tick in flight
        await asyncio.shield(self._loop_task)

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Start, block until the stop signal, and always stop."""
        await self.start(stop_event)
        try:
            await self.wait()
        finally:
            await self.stop()

    async def _shutdown(self, cleanup_event: asyncio.Event) -> None:
        self._state = SchedulerState.STOPPING
        try:
            await self.registry.cleanup_all(cleanup_event)
            logger.info("System Monitor Service stopped successfully")
        except Exception as e:
            logger.error(f"Error during service shutdown: {e}", exc_info=e)
        finally:
            self._state = SchedulerState.STOPPED

    async def _run_loop(self) -> None:
        """Main monitoring loop (runs as its own task)."""
        stop_event = self._stop_event
        logger.info(f"System monitoring started with interval: {self.interval_seconds} seconds")

        try:
            while not stop_event.is_set():
                await self._tick(stop_event)
                if await self._wait_interval(stop_event):
                    break
        except Exception as e:
            logger.error(f"Unexpected error in monitoring loop: {e}", exc_info=e)
            raise

        logger.info("System monitoring stopped")

    async def _tick(self, stop_event: asyncio.Event) -> None:
        self.tick_count += 1
        try:
            snapshot = await self.provider.sample()
        except Exception as e:
            self.failed_samples += 1
            logger.error(f"Error collecting system metrics, skipping dispatch: {e}", exc_info=e)
            return

        self.last_snapshot = snapshot
        logger.debug(f"Tick #{self.tick_count}: {snapshot.summary()}")
        # Registry errors are orchestration bugs and end the run
        await self.registry.dispatch_all(snapshot, stop_event)

    async def _wait_interval(self, stop_event: asyncio.Event) -> bool:
        """Wait one interval. Returns True if the stop signal fired meanwhile."""
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)
        except asyncio.TimeoutError:
            return False
        return True

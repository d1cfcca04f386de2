"""Shared fixtures: scripted providers and recording plugins."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from sysmon.core.exceptions import SamplingError
from sysmon.core.models import MetricsSnapshot
from sysmon.core.plugin import ISinkPlugin
from sysmon.core.provider import IMetricsProvider
from sysmon.orchestration.registry import PluginRegistry


GB = 1024 ** 3


class RecordingPlugin(ISinkPlugin):
    """Plugin that records every call and can be told to fail."""

    def __init__(self, name: str, fail_on: tuple = ()):
        self.name = name
        self.fail_on = set(fail_on)
        self.calls = {"initialize": 0, "process": 0, "cleanup": 0}
        self.snapshots: list[MetricsSnapshot] = []
        self.process_finished_at: list[float] = []

    async def _record(self, phase: str) -> None:
        self.calls[phase] += 1
        await asyncio.sleep(0)
        if phase in self.fail_on:
            raise RuntimeError(f"{self.name} failed to {phase}")

    async def initialize(self, stop_event: Optional[asyncio.Event] = None) -> None:
        await self._record("initialize")

    async def process(self, snapshot: MetricsSnapshot, stop_event: Optional[asyncio.Event] = None) -> None:
        self.snapshots.append(snapshot)
        try:
            await self._record("process")
        finally:
            self.process_finished_at.append(asyncio.get_running_loop().time())

    async def cleanup(self, stop_event: Optional[asyncio.Event] = None) -> None:
        await self._record("cleanup")


class ScriptedProvider(IMetricsProvider):
    """Provider returning synthetic snapshots.

    Fails on the 1-based call numbers in ``fail_on`` and sets ``stop_event``
    on call ``stop_after``.
    """

    def __init__(
        self,
        fail_on: tuple = (),
        stop_after: Optional[int] = None,
        stop_event: Optional[asyncio.Event] = None,
    ):
        self.fail_on = set(fail_on)
        self.stop_after = stop_after
        self.stop_event = stop_event
        self.calls = 0
        self.started_at: list[float] = []
        self._base = datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def sample(self) -> MetricsSnapshot:
        self.calls += 1
        self.started_at.append(asyncio.get_running_loop().time())
        if self.stop_after is not None and self.calls >= self.stop_after and self.stop_event is not None:
            self.stop_event.set()
        if self.calls in self.fail_on:
            raise SamplingError(f"sample {self.calls} failed")
        return make_snapshot(captured_at=self._base + timedelta(seconds=self.calls))


class CountingRegistry(PluginRegistry):
    """Registry that counts dispatch_all calls."""

    def __init__(self) -> None:
        super().__init__()
        self.dispatch_count = 0
        self.cleanup_count = 0

    async def dispatch_all(self, snapshot, stop_event=None):
        self.dispatch_count += 1
        return await super().dispatch_all(snapshot, stop_event)

    async def cleanup_all(self, stop_event=None):
        self.cleanup_count += 1
        return await super().cleanup_all(stop_event)


def make_snapshot(**overrides) -> MetricsSnapshot:
    values = dict(
        cpu_usage_percent=25.0,
        ram_used_bytes=4 * GB,
        ram_total_bytes=16 * GB,
        disk_used_bytes=100 * GB,
        disk_total_bytes=500 * GB,
        captured_at=datetime(2024, 1, 1, 12, 30, 45, 123456, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return MetricsSnapshot(**values)


@pytest.fixture
def snapshot():
    """A valid snapshot with round numbers."""
    return make_snapshot()


@pytest.fixture
def plugin_factory():
    """Factory for recording plugins."""
    return RecordingPlugin


@pytest.fixture
def provider_factory():
    """Factory for scripted providers."""
    return ScriptedProvider


@pytest.fixture
def counting_registry():
    return CountingRegistry()


@pytest.fixture
def snapshot_factory():
    """Factory for snapshots with overridden fields."""
    return make_snapshot

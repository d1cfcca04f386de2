"""Tests for the plugin registry."""

import asyncio
import logging
import pytest
from sysmon.core.exceptions import RegistryError
from sysmon.core.plugin import ISinkPlugin
from sysmon.orchestration.registry import PluginPhase, PluginRegistry


@pytest.fixture
def registry():
    return PluginRegistry()


def test_register_rejects_none(registry):
    """Test registering None is an invalid argument."""
    with pytest.raises(ValueError):
        registry.register(None)


def test_register_keeps_order_and_duplicates(registry, plugin_factory):
    """Test registration is append-only and duplicate names are kept."""
    first = plugin_factory("Sink")
    second = plugin_factory("Sink")
    registry.register(first)
    registry.register(second)
    assert len(registry) == 2
    assert list(registry) == [first, second]


@pytest.mark.asyncio
async def test_register_after_initialize_fails(registry, plugin_factory):
    """Test registration is closed once plugins are initialized."""
    registry.register(plugin_factory("A"))
    await registry.initialize_all()
    with pytest.raises(RegistryError):
        registry.register(plugin_factory("B"))


@pytest.mark.asyncio
async def test_dispatch_isolates_failing_plugin(registry, plugin_factory, snapshot):
    """Test one plugin's process failure does not affect the others."""
    a = plugin_factory("A")
    b = plugin_factory("B", fail_on=("process",))
    c = plugin_factory("C")
    for plugin in (a, b, c):
        registry.register(plugin)

    outcomes = await registry.dispatch_all(snapshot)

    assert a.snapshots == [snapshot]
    assert b.snapshots == [snapshot]
    assert c.snapshots == [snapshot]
    assert [o.plugin_name for o in outcomes] == ["A", "B", "C"]
    assert [o.ok for o in outcomes] == [True, False, True]
    assert outcomes[1].phase is PluginPhase.PROCESS
    assert isinstance(outcomes[1].error, RuntimeError)


@pytest.mark.asyncio
async def test_dispatch_logs_plugin_name(registry, plugin_factory, snapshot, caplog):
    """Test per-plugin failures are logged with the plugin's name."""
    registry.register(plugin_factory("Broken Sink", fail_on=("process",)))
    with caplog.at_level(logging.ERROR, logger="sysmon.orchestration.registry"):
        await registry.dispatch_all(snapshot)
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "Broken Sink" in errors[0].getMessage()
    assert errors[0].plugin == "Broken Sink"


@pytest.mark.asyncio
async def test_dispatch_rejects_none(registry):
    """Test dispatching None is an invalid argument."""
    with pytest.raises(ValueError):
        await registry.dispatch_all(None)


@pytest.mark.asyncio
async def test_initialize_and_cleanup_complete_when_all_fail(registry, plugin_factory):
    """Test lifecycle fan-out completes even if every plugin fails."""
    plugins = [plugin_factory(f"P{i}", fail_on=("initialize", "cleanup")) for i in range(3)]
    for plugin in plugins:
        registry.register(plugin)

    init_outcomes = await asyncio.wait_for(registry.initialize_all(), timeout=1)
    cleanup_outcomes = await asyncio.wait_for(registry.cleanup_all(), timeout=1)

    assert all(not o.ok for o in init_outcomes)
    assert all(not o.ok for o in cleanup_outcomes)
    assert all(p.calls["initialize"] == 1 and p.calls["cleanup"] == 1 for p in plugins)


@pytest.mark.asyncio
async def test_empty_registry_fan_out(registry, snapshot):
    """Test fan-out over no plugins is a no-op."""
    assert await registry.initialize_all() == []
    assert await registry.dispatch_all(snapshot) == []
    assert await registry.cleanup_all() == []


class HandshakePlugin(ISinkPlugin):
    """Initializes only once its peer has started initializing."""

    def __init__(self, name, own: asyncio.Event, peer: asyncio.Event):
        self.name = name
        self.own = own
        self.peer = peer

    async def initialize(self, stop_event=None):
        self.own.set()
        await self.peer.wait()

    async def process(self, snapshot, stop_event=None):
        pass

    async def cleanup(self, stop_event=None):
        pass


@pytest.mark.asyncio
async def test_initialize_runs_concurrently(registry):
    """Test a blocked plugin does not block another plugin's startup."""
    a_started, b_started = asyncio.Event(), asyncio.Event()
    registry.register(HandshakePlugin("A", a_started, b_started))
    registry.register(HandshakePlugin("B", b_started, a_started))

    # Sequential initialization would deadlock here
    outcomes = await asyncio.wait_for(registry.initialize_all(), timeout=1)
    assert all(o.ok for o in outcomes)


class SlowPlugin(ISinkPlugin):
    name = "Slow"

    def __init__(self):
        self.done = False

    async def initialize(self, stop_event=None):
        pass

    async def process(self, snapshot, stop_event=None):
        await asyncio.sleep(0.05)
        self.done = True

    async def cleanup(self, stop_event=None):
        pass


@pytest.mark.asyncio
async def test_dispatch_waits_for_every_plugin(registry, plugin_factory, snapshot):
    """Test dispatch returns only after every plugin has settled."""
    slow = SlowPlugin()
    registry.register(plugin_factory("Fast", fail_on=("process",)))
    registry.register(slow)
    await registry.dispatch_all(snapshot)
    assert slow.done is True


@pytest.mark.asyncio
async def test_cleanup_passes_stop_event(registry, plugin_factory):
    """Test the shared stop signal reaches plugins."""
    seen = []

    class EventPlugin(ISinkPlugin):
        name = "Event"

        async def initialize(self, stop_event=None):
            pass

        async def process(self, snapshot, stop_event=None):
            pass

        async def cleanup(self, stop_event=None):
            seen.append(stop_event)

    stop_event = asyncio.Event()
    registry.register(EventPlugin())
    await registry.cleanup_all(stop_event)
    assert seen == [stop_event]


class SelfCancellingPlugin(ISinkPlugin):
    name = "Self Cancelling"

    async def initialize(self, stop_event=None):
        pass

    async def process(self, snapshot, stop_event=None):
        raise asyncio.CancelledError()

    async def cleanup(self, stop_event=None):
        pass


@pytest.mark.asyncio
async def test_plugin_cancelled_error_is_isolated(registry, snapshot, caplog):
    """Test a plugin raising CancelledError neither aborts nor short-cuts the fan-out."""
    slow = SlowPlugin()
    registry.register(SelfCancellingPlugin())
    registry.register(slow)

    with caplog.at_level(logging.ERROR, logger="sysmon.orchestration.registry"):
        outcomes = await registry.dispatch_all(snapshot)

    assert slow.done is True
    assert [o.ok for o in outcomes] == [False, True]
    assert isinstance(outcomes[0].error, asyncio.CancelledError)
    assert [r.plugin for r in caplog.records if r.levelno == logging.ERROR] == ["Self Cancelling"]


@pytest.mark.asyncio
async def test_cancelling_caller_propagates(registry, snapshot):
    """Test cancelling the dispatching task is not swallowed as a plugin failure."""
    slow = SlowPlugin()
    registry.register(slow)

    task = asyncio.create_task(registry.dispatch_all(snapshot))
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert slow.done is False

"""Orchestration module.

This module handles plugin fan-out and the periodic monitoring loop.
"""

from sysmon.orchestration.registry import PluginOutcome, PluginPhase, PluginRegistry
from sysmon.orchestration.scheduler import MonitoringScheduler, SchedulerState

__all__ = [
    "PluginOutcome",
    "PluginPhase",
    "PluginRegistry",
    "MonitoringScheduler",
    "SchedulerState",
]

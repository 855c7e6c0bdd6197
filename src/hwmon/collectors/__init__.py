"""Collection engine for hwmon.

- Collector: Concurrent fan-out of the three provider queries
- Aggregator: Partial-failure merge of samples into a Snapshot
- Scheduler: Refresh cadence and event dispatch loop
- Tick, Resize, Quit: Control events consumed by the Scheduler
"""

from hwmon.collectors.aggregator import Aggregator
from hwmon.collectors.base import MetricSample
from hwmon.collectors.collector import Collector
from hwmon.collectors.events import (
    EventSource,
    QueueEventSource,
    Quit,
    Resize,
    ScheduleEvent,
    Tick,
)
from hwmon.collectors.scheduler import PeriodicTimer, Scheduler, SchedulerState

__all__ = [
    "Aggregator",
    "Collector",
    "EventSource",
    "MetricSample",
    "PeriodicTimer",
    "QueueEventSource",
    "Quit",
    "Resize",
    "ScheduleEvent",
    "Scheduler",
    "SchedulerState",
    "Tick",
]

"""Fake adapters for testing."""

from .fake_clock import FakeClock
from .fake_logging_adapter import FakeLoggingAdapter
from .fake_metrics import FakeMetricsAdapter
from .flaky_lease_store import FlakyLeaseStore
from .millisecond_lease_store import MillisecondLeaseStore
from .recording_event_emitter import RecordingEventEmitter

__all__ = [
    "FakeClock",
    "FakeLoggingAdapter",
    "FakeMetricsAdapter",
    "FlakyLeaseStore",
    "MillisecondLeaseStore",
    "RecordingEventEmitter",
]

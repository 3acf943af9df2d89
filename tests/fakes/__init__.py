"""Fake registries, resource managers and event sinks for lifecycle tests (no AWS)."""

from .providers import (
    FakeRegistry,
    FakeRegistryAlwaysFail,
    FakeResourceManager,
    FakeResourceManagerFailOn,
    RecordingEventSink,
    stage,
)

__all__ = [
    "FakeRegistry",
    "FakeRegistryAlwaysFail",
    "FakeResourceManager",
    "FakeResourceManagerFailOn",
    "RecordingEventSink",
    "stage",
]

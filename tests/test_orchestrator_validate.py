"""
Tests for candidate validation: construction-time retention check, format
gate, strict increase over the latest deployed version, and the
configured-candidate deployment gate.
"""
from __future__ import annotations

import pytest

from api_version_manager.config import Settings
from api_version_manager.core.context import ServiceContext
from api_version_manager.core.errors import (
    InvalidFormat,
    InvalidRetentionPolicy,
    MissingCandidateVersion,
    MissingRetentionPolicy,
    RegistryUnreachable,
    VersionNotIncreasing,
)
from api_version_manager.orchestrator import LifecycleOrchestrator
from tests.fakes import (
    FakeRegistry,
    FakeRegistryAlwaysFail,
    FakeResourceManager,
    RecordingEventSink,
    stage,
)

CTX = ServiceContext(service="orders", stage="prod")


def _orchestrator(registry=None, retention=3, candidate=None, events=None):
    settings = Settings(retention_count=retention, candidate_version=candidate)
    return LifecycleOrchestrator(
        settings,
        registry or FakeRegistry(),
        FakeResourceManager(),
        events or RecordingEventSink(),
    )


class TestConstruction:
    def test_missing_retention(self):
        with pytest.raises(MissingRetentionPolicy):
            _orchestrator(retention=None)

    @pytest.mark.parametrize("retention", [0, -3])
    def test_invalid_retention(self, retention):
        with pytest.raises(InvalidRetentionPolicy):
            _orchestrator(retention=retention)

    def test_retention_exposed(self):
        assert _orchestrator(retention=4).retention_count == 4


class TestValidateCandidate:
    def test_greater_than_latest(self):
        events = RecordingEventSink()
        result = _orchestrator(events=events).validate_candidate("v1-2-0", stage("v1-1-9"))
        assert result.candidate == "v1-2-0"
        assert result.previous == "v1-1-9"
        assert result.retention_count == 3
        assert events.messages("info") == ["Accepted version v1-2-0; using retention policy: 3 versions"]

    def test_equal_is_rejected(self):
        with pytest.raises(VersionNotIncreasing) as exc_info:
            _orchestrator().validate_candidate("v1-1-9", stage("v1-1-9"))
        assert "v1-1-9" in str(exc_info.value)

    def test_lower_is_rejected(self):
        with pytest.raises(VersionNotIncreasing, match=r"\(v1-9-0\) should be greater than v1-10-0"):
            _orchestrator().validate_candidate("v1-9-0", stage("v1-10-0"))

    def test_missing_marker_is_invalid_format(self):
        with pytest.raises(InvalidFormat):
            _orchestrator().validate_candidate("1-2-0", None)

    @pytest.mark.parametrize("candidate", ["v1-2", "v1.2.0", "v1-2-0-1", "latest", "v1-2-3\n", "v\u0661-2-3", "v1-\uff12-3"])
    def test_other_shapes_rejected(self, candidate):
        with pytest.raises(InvalidFormat):
            _orchestrator().validate_candidate(candidate, None)

    @pytest.mark.parametrize("candidate", [None, "", "  "])
    def test_missing_candidate(self, candidate):
        with pytest.raises(MissingCandidateVersion):
            _orchestrator().validate_candidate(candidate, stage("v1-0-0"))

    def test_first_deployment(self):
        result = _orchestrator().validate_candidate("v1-0-0", None)
        assert result.previous is None

    def test_unreadable_latest_is_ignored(self):
        result = _orchestrator().validate_candidate("v1-0-0", stage(None, identifier="v9"))
        assert result.previous is None

    def test_latest_with_historical_tag_shape(self):
        _orchestrator().validate_candidate("v2-0-0", stage("1.9.9"))
        with pytest.raises(VersionNotIncreasing):
            _orchestrator().validate_candidate("v1-9-9", stage("1.9.9"))

    def test_no_side_effects(self):
        rm = FakeResourceManager()
        orch = LifecycleOrchestrator(Settings(retention_count=1), FakeRegistry(), rm, RecordingEventSink())
        orch.validate_candidate("v3-0-0", stage("v2-0-0"))
        assert rm.calls == []


class TestValidateDeployment:
    def test_uses_latest_deployed(self):
        registry = FakeRegistry([stage("v1-3-0"), stage("v1-10-0"), stage("v1-9-0")])
        events = RecordingEventSink()
        result = _orchestrator(registry, candidate="v1-11-0", events=events).validate_deployment(CTX)
        assert result.previous == "v1-10-0"
        assert events.messages("info")[0] == "Last deployed version: v1-10-0"

    def test_not_increasing(self):
        registry = FakeRegistry([stage("v1-3-0"), stage("v2-0-0")])
        with pytest.raises(VersionNotIncreasing):
            _orchestrator(registry, candidate="v1-4-0").validate_deployment(CTX)

    def test_requires_configured_candidate(self):
        registry = FakeRegistry([stage("v1-0-0")])
        with pytest.raises(MissingCandidateVersion):
            _orchestrator(registry).validate_deployment(CTX)
        assert registry.call_count == 0

    def test_format_checked_before_registry(self):
        registry = FakeRegistryAlwaysFail()
        with pytest.raises(InvalidFormat):
            _orchestrator(registry, candidate="3-0-0").validate_deployment(CTX)
        assert registry.call_count == 0

    @pytest.mark.parametrize("candidate", ["v\u0661-2-3", "v1-\uff12-3"])
    def test_configured_candidate_needs_ascii_digits(self, candidate):
        settings = Settings.from_mapping({"retain_policy": 1, "api_version": candidate})
        registry = FakeRegistryAlwaysFail()
        orch = LifecycleOrchestrator(settings, registry, FakeResourceManager(), RecordingEventSink())
        with pytest.raises(InvalidFormat):
            orch.validate_deployment(CTX)
        assert registry.call_count == 0

    def test_registry_failure_is_fatal(self):
        with pytest.raises(RegistryUnreachable):
            _orchestrator(FakeRegistryAlwaysFail(), candidate="v3-0-0").validate_deployment(CTX)

    def test_empty_registry(self):
        result = _orchestrator(FakeRegistry(), candidate="v1-0-0").validate_deployment(CTX)
        assert result.previous is None

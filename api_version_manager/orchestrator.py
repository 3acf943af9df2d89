"""
Lifecycle orchestrator: candidate validation and retirement of old versions.

A cleanup run moves through QUERYING_REGISTRY -> PLANNING -> RETIRING -> DONE,
or stops in ABORTED when the registry cannot be read. Retirement is strictly
sequential (one delete-then-wait per version, oldest first) and best-effort:
a failing teardown is logged and recorded, and the loop moves on. There is no
rollback.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .config import Settings
from .core.context import ServiceContext
from .core.errors import (
    InvalidFormat,
    MissingCandidateVersion,
    MissingRetentionPolicy,
    RegistryUnreachable,
    ServiceUndefined,
    VersionManagerError,
    VersionNotIncreasing,
)
from .logging_utils import LoggingEventSink
from .providers.base import DeployedVersion, EventSink, ResourceManager, VersionRegistry
from .retention import RetentionDecision, plan_retention, validate_retention_count
from .versioning import CANDIDATE_PATTERN, VersionToken, is_greater, parse_version, sort_versions

logger = logging.getLogger(__name__)

FIRST_VERSION = "v1-0-0"


class RunState(enum.Enum):
    QUERYING_REGISTRY = "QUERYING_REGISTRY"
    PLANNING = "PLANNING"
    RETIRING = "RETIRING"
    DONE = "DONE"
    ABORTED = "ABORTED"


class RetirementStatus(enum.Enum):
    RETIRED = "RETIRED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


@dataclass(frozen=True)
class RetirementOutcome:
    """Terminal state of one retired record."""

    version: DeployedVersion
    status: RetirementStatus
    resource_group: Optional[str] = None
    error: Optional[str] = None


@dataclass
class CleanupReport:
    kept: int = 0
    outcomes: List[RetirementOutcome] = field(default_factory=list)

    def _count(self, status: RetirementStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def retired_successfully(self) -> int:
        return self._count(RetirementStatus.RETIRED)

    @property
    def retired_with_error(self) -> int:
        return self._count(RetirementStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(RetirementStatus.SKIPPED)

    @property
    def attempted(self) -> List[str]:
        """Resource groups a teardown was started for, in order."""
        return [o.resource_group for o in self.outcomes if o.resource_group is not None]

    def summary(self) -> str:
        return (
            f"kept={self.kept} retired={self.retired_successfully} "
            f"failed={self.retired_with_error} skipped={self.skipped}"
        )


@dataclass(frozen=True)
class ValidationResult:
    candidate: str
    previous: Optional[str]
    retention_count: int


class LifecycleOrchestrator:
    """
    Drives validation and cleanup for one configured service.

    Usage:
        orchestrator = LifecycleOrchestrator(settings, registry, resource_manager)
        orchestrator.validate_deployment(ctx)   # before packaging
        report = orchestrator.after_deploy(ctx)  # after a successful deploy
    """

    def __init__(
        self,
        settings: Settings,
        registry: VersionRegistry,
        resource_manager: ResourceManager,
        events: Optional[EventSink] = None,
    ) -> None:
        if settings.retention_count is None:
            raise MissingRetentionPolicy()
        self._retention_count = validate_retention_count(settings.retention_count)
        self._settings = settings
        self._registry = registry
        self._resource_manager = resource_manager
        self._events: EventSink = events or LoggingEventSink(logger)

    @property
    def retention_count(self) -> int:
        return self._retention_count

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def fetch_ordered_versions(self, context: ServiceContext) -> List[DeployedVersion]:
        """Deployed versions for `context`, ascending. Raises ResolutionError on failure."""
        if not context.service:
            raise ServiceUndefined()
        try:
            records = self._registry.list_versioned_stages(context)
        except VersionManagerError:
            raise
        except Exception as exc:
            raise RegistryUnreachable(context, exc) from exc
        return sort_versions(records)

    def list_versions(self, context: ServiceContext) -> List[DeployedVersion]:
        ordered = self.fetch_ordered_versions(context)
        if not ordered:
            self._events.info(f"No versions deployed for {context}")
        for record in ordered:
            self._events.info(f"Version {record.label} (stage {record.identifier})")
        return ordered

    def next_version(self, context: ServiceContext) -> str:
        """Configured candidate if any; else latest readable version with patch bumped."""
        if self._settings.candidate_version:
            return self._settings.candidate_version
        readable = [r for r in self.fetch_ordered_versions(context) if r.version_token is not None]
        if not readable:
            return FIRST_VERSION
        latest: VersionToken = readable[-1].version_token  # type: ignore[assignment]
        return latest.bump_patch().render()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_candidate(
        self, candidate: Optional[str], latest: Optional[DeployedVersion]
    ) -> ValidationResult:
        """
        Gate a deployment of `candidate` against the latest deployed version.

        Raises MissingCandidateVersion, InvalidFormat or VersionNotIncreasing.
        Never touches deployed state.
        """
        if candidate is None or not str(candidate).strip():
            raise MissingCandidateVersion()
        if not CANDIDATE_PATTERN.fullmatch(candidate):
            raise InvalidFormat(candidate)
        token = parse_version(candidate)

        previous: Optional[str] = None
        if latest is not None and latest.present and latest.version_token is not None:
            previous = latest.raw
            if not is_greater(token, latest.version_token):
                raise VersionNotIncreasing(candidate, latest.raw or str(latest.version_token))

        self._events.info(
            f"Accepted version {candidate}; using retention policy: {self._retention_count} versions"
        )
        return ValidationResult(candidate=candidate, previous=previous, retention_count=self._retention_count)

    def validate_deployment(self, context: ServiceContext) -> ValidationResult:
        """Validate the configured candidate against what is deployed for `context`."""
        candidate = self._settings.candidate_version
        if not candidate:
            raise MissingCandidateVersion()
        if not CANDIDATE_PATTERN.fullmatch(candidate):
            raise InvalidFormat(candidate)
        ordered = self.fetch_ordered_versions(context)
        latest = ordered[-1] if ordered else None
        if latest is not None:
            self._events.info(f"Last deployed version: {latest.identifier or 'undefined stage'}")
        return self.validate_candidate(candidate, latest)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def cleanup(self, context: ServiceContext) -> CleanupReport:
        """Retire every version outside the retention window, isolating failures per item."""
        logger.debug("cleanup %s: %s", context, RunState.QUERYING_REGISTRY.value)
        try:
            ordered = self.fetch_ordered_versions(context)
        except VersionManagerError:
            logger.debug("cleanup %s: %s", context, RunState.ABORTED.value)
            raise

        logger.debug("cleanup %s: %s (%d versions)", context, RunState.PLANNING.value, len(ordered))
        decision: RetentionDecision = plan_retention(ordered, self._retention_count)

        logger.debug("cleanup %s: %s (%d to retire)", context, RunState.RETIRING.value, len(decision.retire))
        report = CleanupReport(kept=len(decision.keep))
        for record in decision.retire:
            report.outcomes.append(self._retire(context, record))

        logger.debug("cleanup %s: %s %s", context, RunState.DONE.value, report.summary())
        return report

    def after_deploy(self, context: ServiceContext) -> CleanupReport:
        return self.cleanup(context)

    def _retire(self, context: ServiceContext, record: DeployedVersion) -> RetirementOutcome:
        if record.identifier is None:
            self._events.warning("STAGE undefined, continuing")
            return RetirementOutcome(version=record, status=RetirementStatus.SKIPPED)
        if not record.present or record.raw is None:
            if record.raw is None:
                self._events.info(f"{self._settings.alias_tag} not present for stage {record.identifier}")
            else:
                self._events.info(
                    f"{self._settings.alias_tag} {record.raw!r} unreadable for stage {record.identifier}"
                )
            return RetirementOutcome(version=record, status=RetirementStatus.SKIPPED)

        version = record.raw
        resource_group = context.resource_group_name(version)
        self._events.info(f"Removing stack for version: {version}")
        try:
            self._resource_manager.delete(resource_group)
            self._resource_manager.wait_for_deletion(resource_group)
        except Exception as exc:
            self._events.error(f"Warning: Error removing version {version}: {exc}")
            return RetirementOutcome(
                version=record,
                status=RetirementStatus.FAILED,
                resource_group=resource_group,
                error=f"{type(exc).__name__}: {exc}",
            )
        self._events.success(f"Successfully removed stack for version: {version}")
        return RetirementOutcome(version=record, status=RetirementStatus.RETIRED, resource_group=resource_group)

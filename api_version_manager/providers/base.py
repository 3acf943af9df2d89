"""
Collaborator interfaces and data contracts.

The lifecycle core talks to two external systems:
- VersionRegistry: source of truth for the currently deployed version stages.
- ResourceManager: deletes the resource group backing a version and waits
  for the deletion to finish.

Records are returned via frozen dataclasses; they are never mutated and are
discarded at the end of a run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, runtime_checkable

from ..core.context import ServiceContext
from ..core.errors import UnparseableTag
from ..versioning import DEFAULT_SEPARATORS, VersionToken, parse_tag


@dataclass(frozen=True)
class DeployedVersion:
    """One currently provisioned version stage."""

    identifier: Optional[str]
    version_token: Optional[VersionToken]
    raw: Optional[str]
    present: bool

    @classmethod
    def from_stage(
        cls,
        identifier: Optional[str],
        raw: Optional[str],
        separators: str = DEFAULT_SEPARATORS,
    ) -> "DeployedVersion":
        """Build a record from a stage name and its raw version tag (may be missing)."""
        if raw is None:
            return cls(identifier=identifier, version_token=None, raw=None, present=False)
        try:
            token = parse_tag(raw, separators)
        except UnparseableTag:
            return cls(identifier=identifier, version_token=None, raw=raw, present=False)
        return cls(identifier=identifier, version_token=token, raw=raw, present=True)

    @property
    def label(self) -> str:
        return self.raw or self.identifier or "<unknown>"


@runtime_checkable
class VersionRegistry(Protocol):
    """Protocol for the deployment registry."""

    def resolve_api_root(self, context: ServiceContext) -> str:
        """Return the identifier of the API root; raise RestApiRootNotFound if absent."""
        ...

    def list_versioned_stages(self, context: ServiceContext) -> List[DeployedVersion]:
        """Return the version stages (name carries the version prefix), in discovery order."""
        ...


@runtime_checkable
class ResourceManager(Protocol):
    """Protocol for the system that tears down a version's resources."""

    def delete(self, resource_group: str) -> None:
        ...

    def wait_for_deletion(self, resource_group: str) -> None:
        ...


@runtime_checkable
class EventSink(Protocol):
    """One-way sink for lifecycle events; return values are never consumed."""

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

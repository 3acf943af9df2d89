"""
Explicit service/stage context passed into every registry and orchestrator call.
Replaces reading the current service and stage from ambient framework state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_STAGE = "dev"


@dataclass(frozen=True)
class ServiceContext:
    """Identity of one deployed service stage (e.g. service 'orders', stage 'prod')."""

    service: Optional[str]
    stage: str = DEFAULT_STAGE
    region: Optional[str] = None

    @property
    def root_stack_name(self) -> str:
        """Name of the stack that owns the API root: '{service}-{stage}'."""
        return f"{self.service}-{self.stage}"

    def resource_group_name(self, version: str) -> str:
        """Name of the resource group backing one version: '{service}-{stage}-{version}'."""
        return f"{self.service or ''}-{self.stage}-{version}"

    def __str__(self) -> str:
        return f"{self.service}/{self.stage}"

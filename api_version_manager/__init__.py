"""
Top-level public API surface. Stable facades only.
Does not import cli.
"""

from __future__ import annotations

from ._version import __version__
from .config import Settings, load_settings
from .core import ServiceContext, VersionManagerError
from .orchestrator import CleanupReport, LifecycleOrchestrator, RetirementStatus
from .retention import RetentionDecision, plan_retention
from .versioning import VersionToken, compare, is_greater, parse_tag, parse_version

# Do not add exports without updating __all__.
__all__ = [
    "__version__",
    "CleanupReport",
    "LifecycleOrchestrator",
    "RetentionDecision",
    "RetirementStatus",
    "ServiceContext",
    "Settings",
    "VersionManagerError",
    "VersionToken",
    "compare",
    "is_greater",
    "load_settings",
    "parse_tag",
    "parse_version",
    "plan_retention",
]

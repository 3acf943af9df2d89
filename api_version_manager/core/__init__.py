"""
Stable facade: service context and the exception taxonomy.
Core-only: no imports from providers, orchestrator, or cli.
"""

from __future__ import annotations

from .context import DEFAULT_STAGE, ServiceContext
from .errors import (
    ConfigurationError,
    InvalidFormat,
    InvalidRetentionPolicy,
    MissingCandidateVersion,
    MissingRetentionPolicy,
    RegistryUnreachable,
    ResolutionError,
    RestApiRootNotFound,
    ServiceUndefined,
    UnparseableTag,
    VersionFormatError,
    VersionManagerError,
    VersionNotIncreasing,
)

# Do not add exports without updating __all__.
__all__ = [
    "DEFAULT_STAGE",
    "ServiceContext",
    "ConfigurationError",
    "InvalidFormat",
    "InvalidRetentionPolicy",
    "MissingCandidateVersion",
    "MissingRetentionPolicy",
    "RegistryUnreachable",
    "ResolutionError",
    "RestApiRootNotFound",
    "ServiceUndefined",
    "UnparseableTag",
    "VersionFormatError",
    "VersionManagerError",
    "VersionNotIncreasing",
]

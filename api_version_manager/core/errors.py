"""
Exception taxonomy for api_version_manager.

Configuration, format and ordering errors are fatal to the operation that
raised them. Resolution errors abort a whole cleanup run. Per-item teardown
failures are never raised; they end up in the CleanupReport.
"""

from __future__ import annotations


class VersionManagerError(Exception):
    """Base exception; catch this for any package-raised error."""

    pass


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(VersionManagerError):
    pass


class MissingRetentionPolicy(ConfigurationError):
    def __init__(self, message: str = "retain_policy must be configured in version_manager.retain_policy") -> None:
        super().__init__(message)


class InvalidRetentionPolicy(ConfigurationError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"retain_policy must be a positive integer (got {value!r})")


class MissingCandidateVersion(ConfigurationError):
    def __init__(self, message: str = "api_version must be provided") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------


class VersionFormatError(VersionManagerError, ValueError):
    def __init__(self, raw: object, message: str) -> None:
        self.raw = raw
        super().__init__(message)


class InvalidFormat(VersionFormatError):
    """A user-supplied candidate version does not have the required shape."""

    def __init__(self, raw: object, expected: str = "vX-Y-Z (e.g., v3-2-0)") -> None:
        super().__init__(raw, f"api_version must be in format {expected}, got {raw!r}")


class UnparseableTag(VersionFormatError):
    """A historical version tag could not be parsed; cleanup skips it."""

    def __init__(self, raw: object) -> None:
        super().__init__(raw, f"Version tag {raw!r} could not be parsed")


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


class VersionNotIncreasing(VersionManagerError):
    def __init__(self, candidate: str, latest: str) -> None:
        self.candidate = candidate
        self.latest = latest
        super().__init__(f"The version provided: ({candidate}) should be greater than {latest}")


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class ResolutionError(VersionManagerError):
    pass


class ServiceUndefined(ResolutionError):
    def __init__(self, message: str = "Service is not defined") -> None:
        super().__init__(message)


class RestApiRootNotFound(ResolutionError):
    def __init__(self, stack_name: str, output_key: str = "ApiGatewayRestApi") -> None:
        self.stack_name = stack_name
        super().__init__(f"Rest API ID could not be found: stack {stack_name!r} has no {output_key} output")


class RegistryUnreachable(ResolutionError):
    def __init__(self, context: object, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Deployed versions could not be listed for {context}: {type(cause).__name__}: {cause}")


__all__ = [
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

"""
Collaborators of the lifecycle core.

The core depends only on the protocols in .base; .aws provides the
CloudFormation / API Gateway implementations, with retry/backoff from
.resilience applied on the teardown side.
"""

from __future__ import annotations

from .aws import CloudFormationRegistry, CloudFormationResourceManager
from .base import DeployedVersion, EventSink, ResourceManager, VersionRegistry
from .resilience import RetryConfig, resilient_call

__all__ = [
    "DeployedVersion",
    "EventSink",
    "ResourceManager",
    "VersionRegistry",
    "CloudFormationRegistry",
    "CloudFormationResourceManager",
    "RetryConfig",
    "resilient_call",
]

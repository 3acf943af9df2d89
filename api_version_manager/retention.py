"""
Retention window: split the ordered deployed versions into keep / retire.

Pure and deterministic. The count is validated once, at configuration time,
by validate_retention_count; plan_retention only guards its own contract.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .core.errors import InvalidRetentionPolicy, MissingRetentionPolicy
from .providers.base import DeployedVersion


@dataclass(frozen=True)
class RetentionDecision:
    keep: Tuple[DeployedVersion, ...]
    retire: Tuple[DeployedVersion, ...]


def validate_retention_count(value: object) -> int:
    """
    Parse and check a configured retention count.

    Accepts ints and integer strings ("3"). Missing -> MissingRetentionPolicy;
    non-integer or non-positive -> InvalidRetentionPolicy.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingRetentionPolicy()
    if isinstance(value, bool):
        raise InvalidRetentionPolicy(value)
    if isinstance(value, int):
        count = value
    elif isinstance(value, str):
        try:
            count = int(value.strip(), 10)
        except ValueError:
            raise InvalidRetentionPolicy(value) from None
    else:
        raise InvalidRetentionPolicy(value)
    if count <= 0:
        raise InvalidRetentionPolicy(value)
    return count


def plan_retention(ordered: Sequence[DeployedVersion], retention_count: int) -> RetentionDecision:
    """
    Keep the last min(retention_count, len(ordered)) records, retire the rest.

    `ordered` must already be ascending by version (see versioning.sort_versions);
    both halves preserve that order.
    """
    if isinstance(retention_count, bool) or not isinstance(retention_count, int) or retention_count <= 0:
        raise InvalidRetentionPolicy(retention_count)
    records = tuple(ordered)
    split = max(len(records) - retention_count, 0)
    return RetentionDecision(keep=records[split:], retire=records[:split])

"""
AWS collaborators: API Gateway stages as the version registry, CloudFormation
stacks as the per-version resource groups.

Layout assumed on the AWS side:
- stack '{service}-{stage}' exports the REST API id as output 'ApiGatewayRestApi';
- every deployed version is an API Gateway stage named 'v...' carrying an
  'ALIAS' tag with the version (e.g. 'v3-2-0');
- every version's resources live in stack '{service}-{stage}-{version}'.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

import boto3
from botocore.exceptions import ClientError

from ..core.context import ServiceContext
from ..core.errors import RestApiRootNotFound
from ..versioning import DEFAULT_SEPARATORS
from .base import DeployedVersion
from .resilience import RetryConfig, resilient_call

logger = logging.getLogger(__name__)


class CloudFormationRegistry:
    """VersionRegistry backed by CloudFormation stack outputs and API Gateway stages."""

    def __init__(
        self,
        cloudformation: Any,
        apigateway: Any,
        *,
        version_prefix: str = "v",
        alias_tag: str = "ALIAS",
        api_output_key: str = "ApiGatewayRestApi",
        tag_separators: str = DEFAULT_SEPARATORS,
    ) -> None:
        self._cloudformation = cloudformation
        self._apigateway = apigateway
        self._version_prefix = version_prefix
        self._alias_tag = alias_tag
        self._api_output_key = api_output_key
        self._tag_separators = tag_separators

    @classmethod
    def from_region(cls, region: Optional[str] = None, **kwargs: Any) -> "CloudFormationRegistry":
        """Build with default-credential boto3 clients for `region`."""
        return cls(
            boto3.client("cloudformation", region_name=region),
            boto3.client("apigateway", region_name=region),
            **kwargs,
        )

    def resolve_api_root(self, context: ServiceContext) -> str:
        stack_name = context.root_stack_name
        try:
            response = self._cloudformation.describe_stacks(StackName=stack_name)
        except ClientError as exc:
            # CloudFormation answers ValidationError for a stack that does not exist
            if exc.response.get("Error", {}).get("Code") == "ValidationError":
                raise RestApiRootNotFound(stack_name, self._api_output_key) from exc
            raise
        stacks = response.get("Stacks") or []
        outputs = stacks[0].get("Outputs", []) if stacks else []
        for output in outputs:
            if output.get("OutputKey") == self._api_output_key and output.get("OutputValue"):
                return output["OutputValue"]
        raise RestApiRootNotFound(stack_name, self._api_output_key)

    def list_versioned_stages(self, context: ServiceContext) -> List[DeployedVersion]:
        rest_api_id = self.resolve_api_root(context)
        response = self._apigateway.get_stages(restApiId=rest_api_id)
        records: List[DeployedVersion] = []
        for stage in response.get("item") or []:
            name = stage.get("stageName")
            if name is not None and not name.startswith(self._version_prefix):
                continue
            tags = stage.get("tags") or {}
            records.append(
                DeployedVersion.from_stage(name, tags.get(self._alias_tag), self._tag_separators)
            )
        logger.debug("Found %d version stages on %s for %s", len(records), rest_api_id, context)
        return records


class CloudFormationResourceManager:
    """ResourceManager deleting one CloudFormation stack per retired version."""

    def __init__(
        self,
        cloudformation: Any,
        *,
        retry_config: Optional[RetryConfig] = None,
        wait_delay_s: float = 30.0,
        wait_max_attempts: int = 120,
    ) -> None:
        self._cloudformation = cloudformation
        self._retry_config = retry_config or RetryConfig(max_retries=3, base_delay_s=0.5)
        self._wait_delay_s = wait_delay_s
        self._wait_max_attempts = wait_max_attempts

    @classmethod
    def from_region(cls, region: Optional[str] = None, **kwargs: Any) -> "CloudFormationResourceManager":
        return cls(boto3.client("cloudformation", region_name=region), **kwargs)

    def delete(self, resource_group: str) -> None:
        resilient_call(
            self._cloudformation.delete_stack,
            StackName=resource_group,
            retry_config=self._retry_config,
        )

    def wait_for_deletion(self, resource_group: str) -> None:
        waiter = self._cloudformation.get_waiter("stack_delete_complete")
        waiter.wait(
            StackName=resource_group,
            WaiterConfig={
                "Delay": max(int(self._wait_delay_s), 1),
                "MaxAttempts": self._wait_max_attempts,
            },
        )

"""AWS credentials, region and CloudWatch client construction.

Region precedence: REPORTER_AWS_REGION > AWS_DEFAULT_REGION > AWS_REGION > us-east-1.
Credentials fall back to the default boto3 chain (IAM roles, profiles) when
not given explicitly.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import boto3


@dataclass(frozen=True)
class AWSConfig:
    """AWS configuration from environment variables.

    Attributes:
        region: AWS region
        access_key_id: AWS access key ID (optional if using IAM roles)
        secret_access_key: AWS secret access key (optional if using IAM roles)
        endpoint_url: Custom endpoint for LocalStack/testing
    """
    region: str
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    endpoint_url: Optional[str] = None

    def to_boto3_kwargs(self) -> Dict[str, Any]:
        """Build kwargs dict suitable for boto3 client creation."""
        kwargs: Dict[str, Any] = {"region_name": self.region}
        if self.access_key_id:
            kwargs["aws_access_key_id"] = self.access_key_id
        if self.secret_access_key:
            kwargs["aws_secret_access_key"] = self.secret_access_key
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        return kwargs


def get_aws_config() -> AWSConfig:
    """Load AWS configuration from environment variables."""
    region = (
        os.environ.get("REPORTER_AWS_REGION")
        or os.environ.get("AWS_DEFAULT_REGION")
        or os.environ.get("AWS_REGION")
        or "us-east-1"
    )

    return AWSConfig(
        region=region,
        access_key_id=os.environ.get("AWS_ACCESS_KEY_ID"),
        secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
        endpoint_url=os.environ.get("REPORTER_AWS_ENDPOINT_URL")
        or os.environ.get("AWS_ENDPOINT_URL"),
    )


def create_cloudwatch_client(config: Optional[AWSConfig] = None) -> Any:
    """Create a boto3 CloudWatch client.

    Args:
        config: AWS config (uses get_aws_config() if None)
    """
    if config is None:
        config = get_aws_config()
    return boto3.client("cloudwatch", **config.to_boto3_kwargs())

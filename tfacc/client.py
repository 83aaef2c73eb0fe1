"""
AWS client context passed into checks, sweepers and scenarios.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import ConfigurationError
from .settings import Settings

logger = logging.getLogger(__name__)


def partition_for_region(region: str) -> str:
    """Return the AWS partition a region belongs to."""
    if region.startswith("cn-"):
        return "aws-cn"
    if region.startswith("us-gov-"):
        return "aws-us-gov"
    if region.startswith("us-iso-"):
        return "aws-iso"
    if region.startswith("us-isob-"):
        return "aws-iso-b"
    return "aws"


@dataclass
class AWSClient:
    """Holds a boto3 session for one region plus cached service clients."""
    region: str
    session: Any
    _clients: Dict[str, Any] = field(default_factory=dict, repr=False)
    _account_id: Optional[str] = field(default=None, repr=False)

    @property
    def ec2(self):
        return self._client("ec2")

    @property
    def sts(self):
        return self._client("sts")

    @property
    def partition(self) -> str:
        return partition_for_region(self.region)

    @property
    def account_id(self) -> str:
        """Account ID of the caller, looked up once through STS."""
        if self._account_id is None:
            identity = self.sts.get_caller_identity()
            self._account_id = identity["Account"]
        return self._account_id

    def regional_arn(self, service: str, resource: str) -> str:
        return f"arn:{self.partition}:{service}:{self.region}:{self.account_id}:{resource}"

    def _client(self, service: str):
        if service not in self._clients:
            self._clients[service] = self.session.client(service, region_name=self.region)
        return self._clients[service]


def client_for_region(region: str, settings: Optional[Settings] = None) -> AWSClient:
    """
    Build an AWSClient for a region.

    Args:
        region: AWS region
        settings: Settings supplying the profile (optional)

    Returns:
        AWSClient bound to the region

    Raises:
        ConfigurationError: If no session can be created
    """
    profile = settings.profile if settings else None

    try:
        session = boto3.session.Session(profile_name=profile, region_name=region)
    except (BotoCoreError, ClientError) as e:
        raise ConfigurationError(f"error getting client: {e}") from e

    logger.debug(f"Created AWS client for region {region}")
    return AWSClient(region=region, session=session)


def client_from_settings(settings: Settings) -> AWSClient:
    """Build the AWSClient for the primary test region."""
    return client_for_region(settings.region, settings)


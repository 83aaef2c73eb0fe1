"""
Basic tests for settings and the AWS client context.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ProfileNotFound

from tfacc.client import AWSClient, client_for_region, partition_for_region
from tfacc.errors import ConfigurationError
from tfacc.settings import DEFAULT_REGION, Settings


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.region == DEFAULT_REGION
        assert settings.profile is None
        assert settings.terraform_path == "terraform"
        assert not settings.acceptance
        assert settings.sweep_regions == []
        assert settings.home == Path(".tfacc").resolve()

    def test_from_env(self, tmp_path):
        settings = Settings.from_env({
            "AWS_REGION": "eu-west-1",
            "AWS_PROFILE": "acc",
            "TFACC_HOME": str(tmp_path),
            "TF_ACC": "1",
            "TF_ACC_TERRAFORM_PATH": "/opt/terraform",
            "SWEEP": "us-west-2, us-east-1,",
            "SWEEP_RUN": "aws_vpc",
            "TF_ACC_KEEP_RUNS": "1",
        })

        assert settings.region == "eu-west-1"
        assert settings.profile == "acc"
        assert settings.home == tmp_path.resolve()
        assert settings.acceptance
        assert settings.terraform_path == "/opt/terraform"
        assert settings.sweep_regions == ["us-west-2", "us-east-1"]
        assert settings.sweep_filter == ["aws_vpc"]
        assert settings.keep_runs

    def test_default_region_wins(self):
        settings = Settings.from_env({"AWS_DEFAULT_REGION": "us-east-2", "AWS_REGION": "eu-west-1"})
        assert settings.region == "us-east-2"


class TestPartition:
    """Test region to partition mapping."""

    @pytest.mark.parametrize("region,partition", [
        ("us-west-2", "aws"),
        ("cn-north-1", "aws-cn"),
        ("us-gov-west-1", "aws-us-gov"),
        ("us-iso-east-1", "aws-iso"),
        ("us-isob-east-1", "aws-iso-b"),
    ])
    def test_partition(self, region, partition):
        assert partition_for_region(region) == partition


class TestAWSClient:
    """Test the AWS client context."""

    def test_clients_cached_per_service(self):
        session = MagicMock()
        client = AWSClient(region="us-west-2", session=session)

        assert client.ec2 is client.ec2
        session.client.assert_called_once_with("ec2", region_name="us-west-2")

    def test_account_id_looked_up_once(self):
        session = MagicMock()
        session.client.return_value.get_caller_identity.return_value = {"Account": "123456789012"}
        client = AWSClient(region="us-gov-west-1", session=session)

        assert client.account_id == "123456789012"
        assert client.account_id == "123456789012"
        session.client.return_value.get_caller_identity.assert_called_once_with()
        assert client.regional_arn("ec2", "vpc/vpc-1") == "arn:aws-us-gov:ec2:us-gov-west-1:123456789012:vpc/vpc-1"

    def test_client_for_region(self):
        with patch("tfacc.client.boto3.session.Session") as session_cls:
            client = client_for_region("us-east-1", Settings(profile="acc"))

        session_cls.assert_called_once_with(profile_name="acc", region_name="us-east-1")
        assert client.region == "us-east-1"

    def test_bad_profile(self):
        with patch("tfacc.client.boto3.session.Session", side_effect=ProfileNotFound(profile="nope")):
            with pytest.raises(ConfigurationError, match="error getting client"):
                client_for_region("us-east-1", Settings(profile="nope"))

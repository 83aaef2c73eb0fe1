"""
Live EC2 checks for aws_vpc acceptance tests.

Each ``check_*`` factory returns a function that takes a TerraformState and
raises on failure, so they compose with the harness check combinators.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .client import AWSClient
from .errors import CheckError, ErrorKind, classify_error
from .state import TerraformState
from .tags import IgnoreTagsConfig, ec2_update_tags, ignore_tags, tags_to_dict

logger = logging.getLogger(__name__)

VPC_RESOURCE_TYPE = "aws_vpc"

Check = Callable[[TerraformState], None]


@dataclass
class VpcHolder:
    """Receives the VPC described by check_vpc_exists for later checks."""
    vpc: Dict[str, Any] = field(default_factory=dict)

    @property
    def vpc_id(self) -> str:
        return self.vpc.get("VpcId", "")

    @property
    def cidr_block(self) -> str:
        return self.vpc.get("CidrBlock", "")


def describe_vpc(client: AWSClient, vpc_id: str) -> Optional[Dict[str, Any]]:
    """
    Describe one VPC by ID.

    Returns:
        The VPC dict, or None if the response carried no VPC

    Raises:
        CheckError: If more than one VPC came back for a single ID
        ClientError: Errors from the EC2 API propagate
    """
    resp = client.ec2.describe_vpcs(VpcIds=[vpc_id])
    vpcs = resp.get("Vpcs") or []

    if len(vpcs) > 1:
        raise CheckError(f"expected 1 VPC for {vpc_id}, found {len(vpcs)}", expected="1", actual=str(len(vpcs)))
    if not vpcs or vpcs[0] is None:
        return None

    return vpcs[0]


def check_vpc_exists(client: AWSClient, name: str, holder: VpcHolder) -> Check:
    """Look up the VPC for resource address `name` and store it in holder."""
    def check(state: TerraformState) -> None:
        rs = state.root_module().resources.get(name)
        if rs is None:
            raise CheckError(f"Not found: {name}")

        if not rs.id:
            raise CheckError("No VPC ID is set")

        vpc = describe_vpc(client, rs.id)
        if vpc is None:
            raise CheckError("VPC not found")

        holder.vpc = dict(vpc)

    return check


def check_vpc_cidr(holder: VpcHolder, expected: str) -> Check:
    def check(state: TerraformState) -> None:
        if holder.cidr_block != expected:
            raise CheckError(f"Bad cidr: {holder.cidr_block}", expected=expected, actual=holder.cidr_block)

    return check


def check_vpc_ids_equal(vpc1: VpcHolder, vpc2: VpcHolder) -> Check:
    def check(state: TerraformState) -> None:
        if vpc1.vpc_id != vpc2.vpc_id:
            raise CheckError("VPC IDs not equal", expected=vpc1.vpc_id, actual=vpc2.vpc_id)

    return check


def check_vpc_ids_not_equal(vpc1: VpcHolder, vpc2: VpcHolder) -> Check:
    def check(state: TerraformState) -> None:
        if vpc1.vpc_id == vpc2.vpc_id:
            raise CheckError("VPC IDs are equal", actual=vpc1.vpc_id)

    return check


def check_vpc_disappears(client: AWSClient, holder: VpcHolder) -> Check:
    """Delete the VPC behind terraform's back; API errors propagate unchanged."""
    def check(state: TerraformState) -> None:
        logger.info(f"Deleting EC2 VPC out of band: {holder.vpc_id}")
        client.ec2.delete_vpc(VpcId=holder.vpc_id)

    return check


def check_vpc_update_tags(
    client: AWSClient,
    holder: VpcHolder,
    old_tags: Optional[Dict[str, str]],
    new_tags: Optional[Dict[str, str]],
) -> Check:
    """Change the VPC's tags behind terraform's back."""
    def check(state: TerraformState) -> None:
        ec2_update_tags(client.ec2, holder.vpc_id, old_tags, new_tags)

    return check


def check_vpc_tags(
    client: AWSClient,
    holder: VpcHolder,
    expected: Dict[str, str],
    ignore: Optional[IgnoreTagsConfig] = None,
) -> Check:
    """
    Compare the VPC's live tags with expected, after dropping ignored keys.

    Ignored keys stay on the resource; they only vanish from the comparison.
    """
    def check(state: TerraformState) -> None:
        vpc = describe_vpc(client, holder.vpc_id)
        if vpc is None:
            raise CheckError("VPC not found")

        actual = ignore_tags(tags_to_dict(vpc.get("Tags")), ignore)
        if actual != expected:
            raise CheckError(f"Bad tags: {actual}", expected=str(expected), actual=str(actual))

    return check


def check_vpc_destroy(client: AWSClient) -> Check:
    """Fail if any aws_vpc recorded in state still exists."""
    def check(state: TerraformState) -> None:
        for rs in state.root_module().by_type(VPC_RESOURCE_TYPE):
            try:
                resp = client.ec2.describe_vpcs(VpcIds=[rs.id])
            except Exception as e:
                if classify_error(e) is ErrorKind.NOT_FOUND:
                    continue
                raise

            if resp.get("Vpcs"):
                raise CheckError("VPCs still exist.", actual=rs.id)

    return check

"""
Acceptance test cases for the aws_vpc resource.

Each builder returns a TestCase wired to the given AWSClient; the live
tests in tests/acceptance run them through the harness.
"""

from typing import Callable, Dict, List, Optional

from . import configs
from .checks import (
    VpcHolder,
    check_vpc_cidr,
    check_vpc_destroy,
    check_vpc_disappears,
    check_vpc_exists,
    check_vpc_ids_equal,
    check_vpc_ids_not_equal,
    check_vpc_tags,
    check_vpc_update_tags,
)
from .client import AWSClient
from .harness import (
    TestCase,
    TestStep,
    check_resource_attr,
    check_resource_attr_account_id,
    compose_aggregate_check,
    compose_check,
    match_resource_attr,
    match_resource_attr_regional_arn,
)
from .tags import IgnoreTagsConfig

RESOURCE_NAME = "aws_vpc.test"

# Read does not always set tags, so imported state can lack them:
# https://github.com/hashicorp/terraform/pull/21019
# https://github.com/hashicorp/terraform/issues/20985
IMPORT_IGNORE = ["tags"]


def import_step(resource_name: str = RESOURCE_NAME) -> TestStep:
    return TestStep(
        resource_name=resource_name,
        import_state=True,
        import_state_verify=True,
        import_state_verify_ignore=list(IMPORT_IGNORE),
    )


def _case(client: AWSClient, name: str, steps: List[TestStep], pre_check: Optional[Callable[[], None]]) -> TestCase:
    return TestCase(
        name=name,
        steps=steps,
        pre_check=pre_check,
        check_destroy=check_vpc_destroy(client),
    )


def vpc_basic(client: AWSClient, pre_check: Optional[Callable[[], None]] = None) -> TestCase:
    vpc = VpcHolder()

    return _case(client, "vpc_basic", [
        TestStep(
            config=configs.VPC_CONFIG,
            check=compose_check(
                check_vpc_exists(client, RESOURCE_NAME, vpc),
                check_vpc_cidr(vpc, "10.1.0.0/16"),
                match_resource_attr_regional_arn(client, RESOURCE_NAME, "arn", "ec2", r"vpc/vpc-.+"),
                check_resource_attr(RESOURCE_NAME, "assign_generated_ipv6_cidr_block", "false"),
                match_resource_attr(RESOURCE_NAME, "default_route_table_id", r"^rtb-.+"),
                check_resource_attr(RESOURCE_NAME, "cidr_block", "10.1.0.0/16"),
                check_resource_attr(RESOURCE_NAME, "enable_dns_support", "true"),
                check_resource_attr(RESOURCE_NAME, "instance_tenancy", "default"),
                check_resource_attr(RESOURCE_NAME, "ipv6_association_id", ""),
                check_resource_attr(RESOURCE_NAME, "ipv6_cidr_block", ""),
                match_resource_attr(RESOURCE_NAME, "main_route_table_id", r"^rtb-.+"),
                check_resource_attr_account_id(client, RESOURCE_NAME, "owner_id"),
            ),
        ),
        import_step(),
    ], pre_check)


def vpc_disappears(client: AWSClient, pre_check: Optional[Callable[[], None]] = None) -> TestCase:
    vpc = VpcHolder()

    return _case(client, "vpc_disappears", [
        TestStep(
            config=configs.VPC_CONFIG,
            check=compose_check(
                check_vpc_exists(client, RESOURCE_NAME, vpc),
                check_vpc_disappears(client, vpc),
            ),
            expect_non_empty_plan=True,
        ),
    ], pre_check)


def vpc_ignore_tags(client: AWSClient, pre_check: Optional[Callable[[], None]] = None) -> TestCase:
    vpc = VpcHolder()
    declared: Dict[str, str] = {"foo": "bar", "Name": "terraform-testacc-vpc-tags"}

    return _case(client, "vpc_ignore_tags", [
        TestStep(
            config=configs.VPC_CONFIG_TAGS,
            check=compose_check(
                check_vpc_exists(client, RESOURCE_NAME, vpc),
                check_vpc_update_tags(client, vpc, None, {"ignorekey1": "ignorevalue1"}),
                check_vpc_tags(client, vpc, declared, IgnoreTagsConfig(key_prefixes=["ignorekey"])),
            ),
            expect_non_empty_plan=True,
        ),
        TestStep(
            config=configs.provider_config_ignore_tags_key_prefixes1("ignorekey") + configs.VPC_CONFIG_TAGS,
            plan_only=True,
        ),
        TestStep(
            config=configs.provider_config_ignore_tags_keys1("ignorekey1") + configs.VPC_CONFIG_TAGS,
            plan_only=True,
        ),
    ], pre_check)


def _ipv6_step(client: AWSClient, vpc: VpcHolder, enabled: bool) -> TestStep:
    if enabled:
        ipv6_checks = [
            match_resource_attr(RESOURCE_NAME, "ipv6_association_id", r"^vpc-cidr-assoc-.+"),
            match_resource_attr(RESOURCE_NAME, "ipv6_cidr_block", r"/56$"),
        ]
    else:
        ipv6_checks = [
            check_resource_attr(RESOURCE_NAME, "ipv6_association_id", ""),
            check_resource_attr(RESOURCE_NAME, "ipv6_cidr_block", ""),
        ]

    return TestStep(
        config=configs.vpc_config_assign_generated_ipv6_cidr_block(enabled),
        check=compose_aggregate_check(
            check_vpc_exists(client, RESOURCE_NAME, vpc),
            check_vpc_cidr(vpc, "10.1.0.0/16"),
            check_resource_attr(RESOURCE_NAME, "assign_generated_ipv6_cidr_block", configs.hcl_bool(enabled)),
            check_resource_attr(RESOURCE_NAME, "cidr_block", "10.1.0.0/16"),
            *ipv6_checks,
        ),
    )


def vpc_assign_generated_ipv6_cidr_block(client: AWSClient, pre_check: Optional[Callable[[], None]] = None) -> TestCase:
    vpc = VpcHolder()

    return _case(client, "vpc_assign_generated_ipv6_cidr_block", [
        _ipv6_step(client, vpc, True),
        import_step(),
        _ipv6_step(client, vpc, False),
        _ipv6_step(client, vpc, True),
    ], pre_check)


def vpc_tenancy(client: AWSClient, pre_check: Optional[Callable[[], None]] = None) -> TestCase:
    vpc_dedicated = VpcHolder()
    vpc_default = VpcHolder()

    return _case(client, "vpc_tenancy", [
        TestStep(
            config=configs.VPC_DEDICATED_CONFIG,
            check=compose_check(
                check_vpc_exists(client, RESOURCE_NAME, vpc_dedicated),
                check_resource_attr(RESOURCE_NAME, "instance_tenancy", "dedicated"),
            ),
        ),
        import_step(),
        TestStep(
            config=configs.VPC_CONFIG,
            check=compose_check(
                check_vpc_exists(client, RESOURCE_NAME, vpc_default),
                check_resource_attr(RESOURCE_NAME, "instance_tenancy", "default"),
                check_vpc_ids_equal(vpc_dedicated, vpc_default),
            ),
        ),
        TestStep(
            config=configs.VPC_DEDICATED_CONFIG,
            check=compose_check(
                check_vpc_exists(client, RESOURCE_NAME, vpc_dedicated),
                check_resource_attr(RESOURCE_NAME, "instance_tenancy", "dedicated"),
                check_vpc_ids_not_equal(vpc_dedicated, vpc_default),
            ),
        ),
    ], pre_check)


def vpc_tags(client: AWSClient, pre_check: Optional[Callable[[], None]] = None) -> TestCase:
    vpc = VpcHolder()

    return _case(client, "vpc_tags", [
        TestStep(
            config=configs.VPC_CONFIG_TAGS,
            check=compose_check(
                check_vpc_exists(client, RESOURCE_NAME, vpc),
                check_vpc_cidr(vpc, "10.1.0.0/16"),
                check_resource_attr(RESOURCE_NAME, "cidr_block", "10.1.0.0/16"),
                check_resource_attr(RESOURCE_NAME, "tags.%", "2"),
                check_resource_attr(RESOURCE_NAME, "tags.Name", "terraform-testacc-vpc-tags"),
                check_resource_attr(RESOURCE_NAME, "tags.foo", "bar"),
            ),
        ),
        import_step(),
        TestStep(
            config=configs.VPC_CONFIG_TAGS_UPDATE,
            check=compose_check(
                check_vpc_exists(client, RESOURCE_NAME, vpc),
                check_resource_attr(RESOURCE_NAME, "tags.%", "2"),
                check_resource_attr(RESOURCE_NAME, "tags.Name", "terraform-testacc-vpc-tags"),
                check_resource_attr(RESOURCE_NAME, "tags.bar", "baz"),
            ),
        ),
    ], pre_check)


def vpc_update(client: AWSClient, pre_check: Optional[Callable[[], None]] = None) -> TestCase:
    vpc = VpcHolder()

    return _case(client, "vpc_update", [
        TestStep(
            config=configs.VPC_CONFIG,
            check=compose_check(
                check_vpc_exists(client, RESOURCE_NAME, vpc),
                check_vpc_cidr(vpc, "10.1.0.0/16"),
                check_resource_attr(RESOURCE_NAME, "cidr_block", "10.1.0.0/16"),
            ),
        ),
        TestStep(
            config=configs.VPC_CONFIG_UPDATE,
            check=compose_check(
                check_vpc_exists(client, RESOURCE_NAME, vpc),
                check_resource_attr(RESOURCE_NAME, "enable_dns_hostnames", "true"),
            ),
        ),
    ], pre_check)


def _attr_case(
    client: AWSClient,
    name: str,
    config: str,
    attributes: Dict[str, str],
    pre_check: Optional[Callable[[], None]],
) -> TestCase:
    vpc = VpcHolder()
    attr_checks = [check_resource_attr(RESOURCE_NAME, key, value) for key, value in attributes.items()]

    return _case(client, name, [
        TestStep(
            config=config,
            check=compose_check(check_vpc_exists(client, RESOURCE_NAME, vpc), *attr_checks),
        ),
        import_step(),
    ], pre_check)


# https://github.com/hashicorp/terraform/issues/1301
def vpc_both_dns_options_set(client: AWSClient, pre_check: Optional[Callable[[], None]] = None) -> TestCase:
    return _attr_case(client, "vpc_both_dns_options_set", configs.VPC_CONFIG_BOTH_DNS_OPTIONS, {
        "enable_dns_hostnames": "true",
        "enable_dns_support": "true",
    }, pre_check)


# https://github.com/hashicorp/terraform/issues/10168
def vpc_disabled_dns_support(client: AWSClient, pre_check: Optional[Callable[[], None]] = None) -> TestCase:
    return _attr_case(client, "vpc_disabled_dns_support", configs.VPC_CONFIG_DISABLED_DNS_SUPPORT, {
        "enable_dns_support": "false",
    }, pre_check)


def vpc_classiclink_option_set(client: AWSClient, pre_check: Optional[Callable[[], None]] = None) -> TestCase:
    return _attr_case(client, "vpc_classiclink_option_set", configs.VPC_CONFIG_CLASSICLINK_OPTION, {
        "enable_classiclink": "true",
    }, pre_check)


def vpc_classiclink_dns_support_option_set(client: AWSClient, pre_check: Optional[Callable[[], None]] = None) -> TestCase:
    return _attr_case(
        client,
        "vpc_classiclink_dns_support_option_set",
        configs.VPC_CONFIG_CLASSICLINK_DNS_SUPPORT_OPTION,
        {"enable_classiclink_dns_support": "true"},
        pre_check,
    )


ALL_SCENARIOS: Dict[str, Callable[..., TestCase]] = {
    "basic": vpc_basic,
    "disappears": vpc_disappears,
    "ignore_tags": vpc_ignore_tags,
    "assign_generated_ipv6_cidr_block": vpc_assign_generated_ipv6_cidr_block,
    "tenancy": vpc_tenancy,
    "tags": vpc_tags,
    "update": vpc_update,
    "both_dns_options_set": vpc_both_dns_options_set,
    "disabled_dns_support": vpc_disabled_dns_support,
    "classiclink_option_set": vpc_classiclink_option_set,
    "classiclink_dns_support_option_set": vpc_classiclink_dns_support_option_set,
}

"""
Terraform configuration fixtures for the aws_vpc acceptance tests.

Everything here is plain string construction; validity is decided by
terraform and the EC2 API at apply time.
"""

from typing import Dict, Iterable


def hcl_bool(value: bool) -> str:
    """Render a Python bool as an HCL literal."""
    return "true" if value else "false"


VPC_CONFIG = """
resource "aws_vpc" "test" {
  cidr_block = "10.1.0.0/16"

  tags = {
    Name = "terraform-testacc-vpc"
  }
}
"""


def vpc_config_assign_generated_ipv6_cidr_block(assign_generated_ipv6_cidr_block: bool) -> str:
    return f"""
resource "aws_vpc" "test" {{
  assign_generated_ipv6_cidr_block = {hcl_bool(assign_generated_ipv6_cidr_block)}
  cidr_block                       = "10.1.0.0/16"

  tags = {{
    Name = "terraform-testacc-vpc-ipv6"
  }}
}}
"""


VPC_CONFIG_UPDATE = """
resource "aws_vpc" "test" {
  cidr_block           = "10.1.0.0/16"
  enable_dns_hostnames = true

  tags = {
    Name = "terraform-testacc-vpc"
  }
}
"""

VPC_CONFIG_TAGS = """
resource "aws_vpc" "test" {
  cidr_block = "10.1.0.0/16"

  tags = {
    foo  = "bar"
    Name = "terraform-testacc-vpc-tags"
  }
}
"""

VPC_CONFIG_TAGS_UPDATE = """
resource "aws_vpc" "test" {
  cidr_block = "10.1.0.0/16"

  tags = {
    bar  = "baz"
    Name = "terraform-testacc-vpc-tags"
  }
}
"""

VPC_DEDICATED_CONFIG = """
resource "aws_vpc" "test" {
  instance_tenancy = "dedicated"
  cidr_block       = "10.1.0.0/16"

  tags = {
    Name = "terraform-testacc-vpc-dedicated"
  }
}
"""

# https://github.com/hashicorp/terraform/issues/1301
VPC_CONFIG_BOTH_DNS_OPTIONS = """
resource "aws_vpc" "test" {
  cidr_block           = "10.2.0.0/16"
  enable_dns_hostnames = true
  enable_dns_support   = true

  tags = {
    Name = "terraform-testacc-vpc-both-dns-opts"
  }
}
"""

# https://github.com/hashicorp/terraform/issues/10168
VPC_CONFIG_DISABLED_DNS_SUPPORT = """
resource "aws_vpc" "test" {
  cidr_block         = "10.2.0.0/16"
  enable_dns_support = false

  tags = {
    Name = "terraform-testacc-vpc-disabled-dns-support"
  }
}
"""

VPC_CONFIG_CLASSICLINK_OPTION = """
resource "aws_vpc" "test" {
  cidr_block         = "172.2.0.0/16"
  enable_classiclink = true

  tags = {
    Name = "terraform-testacc-vpc-classic-link"
  }
}
"""

VPC_CONFIG_CLASSICLINK_DNS_SUPPORT_OPTION = """
resource "aws_vpc" "test" {
  cidr_block                     = "172.2.0.0/16"
  enable_classiclink             = true
  enable_classiclink_dns_support = true

  tags = {
    Name = "terraform-testacc-vpc-classic-link-support"
  }
}
"""


def _hcl_list(values: Iterable[str]) -> str:
    return "[" + ", ".join(f'"{v}"' for v in values) + "]"


def provider_config_ignore_tags_key_prefixes1(key_prefix1: str) -> str:
    """Provider block ignoring every tag key that starts with key_prefix1."""
    return f"""
provider "aws" {{
  ignore_tags {{
    key_prefixes = {_hcl_list([key_prefix1])}
  }}
}}
"""


def provider_config_ignore_tags_keys1(key1: str) -> str:
    """Provider block ignoring the single tag key key1."""
    return f"""
provider "aws" {{
  ignore_tags {{
    keys = {_hcl_list([key1])}
  }}
}}
"""


# Named fixtures, used by the CLI `config` command
NAMED_CONFIGS: Dict[str, str] = {
    "basic": VPC_CONFIG,
    "update": VPC_CONFIG_UPDATE,
    "tags": VPC_CONFIG_TAGS,
    "tags-update": VPC_CONFIG_TAGS_UPDATE,
    "dedicated": VPC_DEDICATED_CONFIG,
    "both-dns-options": VPC_CONFIG_BOTH_DNS_OPTIONS,
    "disabled-dns-support": VPC_CONFIG_DISABLED_DNS_SUPPORT,
    "classiclink": VPC_CONFIG_CLASSICLINK_OPTION,
    "classiclink-dns-support": VPC_CONFIG_CLASSICLINK_DNS_SUPPORT_OPTION,
    "ipv6": vpc_config_assign_generated_ipv6_cidr_block(True),
    "no-ipv6": vpc_config_assign_generated_ipv6_cidr_block(False),
}

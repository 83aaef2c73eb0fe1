"""
Basic tests for configuration fixtures.
"""

from tfacc import configs


class TestConfigs:
    """Test configuration text builders."""

    def test_ipv6_toggle(self):
        on = configs.vpc_config_assign_generated_ipv6_cidr_block(True)
        off = configs.vpc_config_assign_generated_ipv6_cidr_block(False)

        assert "assign_generated_ipv6_cidr_block = true" in on
        assert "assign_generated_ipv6_cidr_block = false" in off
        assert 'resource "aws_vpc" "test" {' in on

    def test_ignore_tags_provider_blocks(self):
        prefixes = configs.provider_config_ignore_tags_key_prefixes1("ignorekey")
        keys = configs.provider_config_ignore_tags_keys1("ignorekey1")

        assert 'provider "aws"' in prefixes
        assert 'key_prefixes = ["ignorekey"]' in prefixes
        assert 'keys = ["ignorekey1"]' in keys

    def test_fixture_values(self):
        assert 'cidr_block = "10.1.0.0/16"' in configs.VPC_CONFIG
        assert 'instance_tenancy = "dedicated"' in configs.VPC_DEDICATED_CONFIG
        assert "enable_dns_support = false" in configs.VPC_CONFIG_DISABLED_DNS_SUPPORT
        assert "enable_classiclink_dns_support = true" in configs.VPC_CONFIG_CLASSICLINK_DNS_SUPPORT_OPTION
        assert 'bar  = "baz"' in configs.VPC_CONFIG_TAGS_UPDATE

    def test_named_configs_are_vpc_resources(self):
        for name, text in configs.NAMED_CONFIGS.items():
            assert text.count('resource "aws_vpc" "test"') == 1, name

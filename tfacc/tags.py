"""
Tagging utilities for EC2 resources and the provider's ignore_tags setting.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class IgnoreTagsConfig:
    """Provider-level tag keys and key prefixes that plans must not see."""
    keys: List[str] = field(default_factory=list)
    key_prefixes: List[str] = field(default_factory=list)

    def ignores(self, key: str) -> bool:
        if key in self.keys:
            return True
        return any(key.startswith(prefix) for prefix in self.key_prefixes)


def tags_to_dict(tags: Optional[Iterable[Dict[str, str]]]) -> Dict[str, str]:
    """Convert an EC2 tag list into a mapping."""
    return {tag["Key"]: tag["Value"] for tag in tags or []}


def dict_to_tags(tags: Dict[str, str]) -> List[Dict[str, str]]:
    """Convert a mapping into an EC2 tag list."""
    return [{"Key": key, "Value": value} for key, value in tags.items()]


def ignore_tags(tags: Dict[str, str], config: Optional[IgnoreTagsConfig] = None) -> Dict[str, str]:
    """
    Drop ignored keys from a tag mapping.

    Args:
        tags: Tag mapping
        config: Ignore configuration (nothing is ignored if None)

    Returns:
        New mapping without ignored keys
    """
    if config is None:
        return dict(tags)
    return {key: value for key, value in tags.items() if not config.ignores(key)}


def ec2_update_tags(
    ec2,
    resource_id: str,
    old_tags: Optional[Dict[str, str]],
    new_tags: Optional[Dict[str, str]],
) -> None:
    """
    Update tags on an EC2 resource from old_tags to new_tags.

    Keys present in old_tags but absent from new_tags are removed; new or
    changed keys are written. Errors from the EC2 API propagate.

    Args:
        ec2: boto3 EC2 client
        resource_id: Resource ID (e.g. vpc-0123)
        old_tags: Tags currently expected on the resource
        new_tags: Desired tags
    """
    old_tags = old_tags or {}
    new_tags = new_tags or {}

    removed = [key for key in old_tags if key not in new_tags]
    if removed:
        logger.debug(f"Removing tags {removed} from {resource_id}")
        ec2.delete_tags(Resources=[resource_id], Tags=[{"Key": key} for key in removed])

    updated = {key: value for key, value in new_tags.items() if old_tags.get(key) != value}
    if updated:
        logger.debug(f"Writing tags {sorted(updated)} to {resource_id}")
        ec2.create_tags(Resources=[resource_id], Tags=dict_to_tags(updated))

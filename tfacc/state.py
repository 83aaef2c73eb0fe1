"""
Run directory management and Terraform state views.
"""

import json
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .ids import is_valid_run_id
from .settings import Settings


def get_home(settings: Optional[Settings] = None) -> Path:
    """
    Get the directory that holds all run directories.

    Args:
        settings: Settings to read the home from (defaults to the environment)

    Returns:
        Path: tfacc home directory
    """
    settings = settings or Settings.from_env()
    return settings.home


def get_run_dir(run_id: str, settings: Optional[Settings] = None) -> Path:
    """
    Get the directory for a specific run.

    Args:
        run_id: Run ID
        settings: Settings to read the home from

    Returns:
        Path: Run directory

    Raises:
        ValueError: If run ID is invalid
    """
    if not is_valid_run_id(run_id):
        raise ValueError(f"Invalid run ID: {run_id}")

    return get_home(settings) / run_id


def create_run_dir(run_id: str, settings: Optional[Settings] = None) -> Path:
    """Create the run directory and return its path."""
    run_dir = get_run_dir(run_id, settings)
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def list_runs(settings: Optional[Settings] = None) -> List[str]:
    """
    List all run IDs.

    Returns:
        List of run IDs, most recent first
    """
    home = get_home(settings)

    if not home.exists():
        return []

    runs = []
    for item in home.iterdir():
        if item.is_dir() and is_valid_run_id(item.name):
            runs.append(item.name)

    return sorted(runs, reverse=True)


def cleanup_run(run_id: str, settings: Optional[Settings] = None) -> None:
    """Remove a run directory and all its contents."""
    run_dir = get_run_dir(run_id, settings)

    if run_dir.exists():
        shutil.rmtree(run_dir)


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def flatten_attributes(values: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """
    Flatten nested attribute values into provider flatmap form.

    Maps become ``key.%`` plus ``key.<k>``, lists and sets become ``key.#``
    plus ``key.<i>``, scalars become strings.

    Args:
        values: Attribute values as emitted by ``terraform show -json``
        prefix: Key prefix for nested calls

    Returns:
        Flat mapping of attribute path to string value
    """
    flat: Dict[str, str] = {}

    for key, value in values.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            flat[f"{path}.%"] = str(len(value))
            flat.update(flatten_attributes(value, prefix=f"{path}."))
        elif isinstance(value, list):
            flat[f"{path}.#"] = str(len(value))
            for index, item in enumerate(value):
                item_path = f"{path}.{index}"
                if isinstance(item, dict):
                    flat.update(flatten_attributes(item, prefix=f"{item_path}."))
                else:
                    flat[item_path] = _scalar(item)
        else:
            flat[path] = _scalar(value)

    return flat


@dataclass
class ResourceState:
    """A single managed resource as recorded in Terraform state."""
    address: str
    type: str
    name: str
    attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.attributes.get("id", "")


@dataclass
class TerraformState:
    """Root-module view of a Terraform state snapshot."""
    resources: Dict[str, ResourceState] = field(default_factory=dict)

    def root_module(self) -> "TerraformState":
        return self

    def by_type(self, resource_type: str) -> Iterator[ResourceState]:
        for resource in self.resources.values():
            if resource.type == resource_type:
                yield resource

    @classmethod
    def from_show_json(cls, data: Dict[str, Any]) -> "TerraformState":
        """
        Build a state view from ``terraform show -json`` output.

        Args:
            data: Decoded JSON document

        Returns:
            TerraformState (empty when nothing is in state)
        """
        root = data.get("values", {}).get("root_module", {})
        resources: Dict[str, ResourceState] = {}

        for resource in root.get("resources", []):
            if resource.get("mode", "managed") != "managed":
                continue
            address = resource["address"]
            resources[address] = ResourceState(
                address=address,
                type=resource["type"],
                name=resource["name"],
                attributes=flatten_attributes(resource.get("values") or {}),
            )

        return cls(resources=resources)

    @classmethod
    def from_show_output(cls, output: str) -> "TerraformState":
        if not output.strip():
            return cls()
        return cls.from_show_json(json.loads(output))

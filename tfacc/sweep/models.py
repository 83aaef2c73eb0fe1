"""
Data models for sweepers and sweep results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional


class DeletionState(Enum):
    """Per-resource deletion lifecycle during a sweep."""
    PENDING = "pending"
    RETRYING = "retrying"
    DELETED = "deleted"
    FAILED = "failed"


@dataclass
class SweepReport:
    """Outcome of sweeping one resource type in one region."""
    region: str
    resource_type: str
    deleted: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)  # protected defaults
    failed: Dict[str, str] = field(default_factory=dict)  # id -> error text
    sweep_skipped: Optional[str] = None  # why the whole sweep was skipped

    def to_dict(self) -> Dict:
        return {
            "region": self.region,
            "resource_type": self.resource_type,
            "deleted": self.deleted,
            "skipped": self.skipped,
            "failed": self.failed,
            "sweep_skipped": self.sweep_skipped,
        }


@dataclass
class Sweeper:
    """A named cleanup routine and the sweepers that must run before it."""
    name: str
    func: Callable  # (AWSClient) -> SweepReport
    dependencies: List[str] = field(default_factory=list)

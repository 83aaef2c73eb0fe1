"""
Sweepers that delete resources leaked by acceptance tests.
"""

from .models import DeletionState, Sweeper, SweepReport
from .registry import SWEEPERS, add_test_sweepers, list_sweepers, run_sweepers
from .vpc import VpcDeletion, sweep_vpcs

__all__ = [
    "DeletionState",
    "Sweeper",
    "SweepReport",
    "SWEEPERS",
    "add_test_sweepers",
    "list_sweepers",
    "run_sweepers",
    "VpcDeletion",
    "sweep_vpcs",
]

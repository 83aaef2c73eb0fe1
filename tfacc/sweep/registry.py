"""
Sweeper registry and region runner.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Set

from ..client import AWSClient, client_for_region
from ..errors import SweepError, TfaccError
from ..settings import Settings
from .models import Sweeper, SweepReport
from .vpc import sweep_vpcs

logger = logging.getLogger(__name__)


# Registry of all known sweepers, keyed by resource type
SWEEPERS: Dict[str, Sweeper] = {}


def add_test_sweepers(name: str, sweeper: Sweeper) -> None:
    """Register a sweeper, replacing any previous one with the same name."""
    SWEEPERS[name] = sweeper


add_test_sweepers("aws_vpc", Sweeper(
    name="aws_vpc",
    func=sweep_vpcs,
    dependencies=[
        "aws_egress_only_internet_gateway",
        "aws_internet_gateway",
        "aws_nat_gateway",
        "aws_network_acl",
        "aws_route_table",
        "aws_security_group",
        "aws_subnet",
        "aws_vpc_peering_connection",
        "aws_vpn_gateway",
    ],
))


def list_sweepers() -> List[Sweeper]:
    return [SWEEPERS[name] for name in sorted(SWEEPERS)]


def _run_sweeper(
    name: str,
    client: AWSClient,
    ran: Set[str],
    reports: Dict[str, SweepReport],
    failures: List[BaseException],
) -> None:
    if name in ran:
        return
    ran.add(name)

    sweeper = SWEEPERS.get(name)
    if sweeper is None:
        logger.debug(f"Sweeper {name} is not registered, skipping")
        return

    for dependency in sweeper.dependencies:
        _run_sweeper(dependency, client, ran, reports, failures)

    logger.info(f"Running sweeper {name} in region {client.region}")
    try:
        reports[name] = sweeper.func(client)
    except SweepError as e:
        if e.report is not None:
            reports[name] = e.report
        failures.append(TfaccError(f"sweeper {name} failed in {client.region}: {e}"))
    except TfaccError as e:
        failures.append(TfaccError(f"sweeper {name} failed in {client.region}: {e}"))


def run_sweepers(
    regions: Iterable[str],
    only: Optional[Iterable[str]] = None,
    settings: Optional[Settings] = None,
    client_factory: Callable[..., AWSClient] = client_for_region,
) -> Dict[str, Dict[str, SweepReport]]:
    """
    Run registered sweepers in each region, dependencies first.

    Args:
        regions: Regions to sweep
        only: Sweeper names to run (all registered sweepers if empty)
        settings: Settings passed to client_factory
        client_factory: Builds an AWSClient for a region

    Returns:
        Mapping of region -> sweeper name -> SweepReport

    Raises:
        SweepError: If any sweeper failed in any region
    """
    names = list(only) if only else sorted(SWEEPERS)
    unknown = [name for name in names if name not in SWEEPERS]
    if unknown:
        raise TfaccError(f"No sweepers found for: {', '.join(unknown)}")

    results: Dict[str, Dict[str, SweepReport]] = {}
    failures: List[BaseException] = []

    for region in regions:
        client = client_factory(region, settings)
        reports: Dict[str, SweepReport] = {}
        ran: Set[str] = set()

        for name in names:
            _run_sweeper(name, client, ran, reports, failures)

        results[region] = reports

    if failures:
        raise SweepError(failures, report=results)

    return results

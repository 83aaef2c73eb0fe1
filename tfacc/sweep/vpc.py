"""
Sweeper for leaked EC2 VPCs.
"""

import logging
import time
from typing import Callable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..client import AWSClient
from ..errors import ErrorKind, SweepError, TfaccError, classify_error, is_skip_sweep_error
from ..retry import NonRetryableError, Retrier, RetryableError, is_resource_timeout_error
from .models import DeletionState, SweepReport

logger = logging.getLogger(__name__)

DELETE_TIMEOUT = 60.0  # seconds


class VpcDeletion:
    """
    Deletes one VPC, retrying while dependent objects are still going away.

    States move pending -> retrying -> deleted | failed. Once the retry
    budget is spent, one final unconditional delete decides the outcome.
    """

    def __init__(
        self,
        ec2,
        vpc_id: str,
        timeout: float = DELETE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.ec2 = ec2
        self.vpc_id = vpc_id
        self.retrier = Retrier(timeout, clock=clock, sleep=sleep)
        self.state = DeletionState.PENDING
        self.error: Optional[BaseException] = None

    @property
    def attempts(self) -> int:
        return self.retrier.attempts

    def _delete(self) -> None:
        self.ec2.delete_vpc(VpcId=self.vpc_id)

    def _attempt(self) -> None:
        try:
            self._delete()
        except (ClientError, BotoCoreError) as e:
            # EC2 eventual consistency: dependents may still be tearing down
            if classify_error(e) is ErrorKind.DEPENDENCY_VIOLATION:
                self.state = DeletionState.RETRYING
                raise RetryableError(e)
            raise NonRetryableError(e)

    def run(self) -> DeletionState:
        try:
            self.retrier.run(self._attempt)
        except Exception as e:
            if not is_resource_timeout_error(e):
                return self._fail(e)

            logger.debug(f"Retry budget spent for EC2 VPC {self.vpc_id}, final attempt")
            try:
                self._delete()
            except Exception as final_error:
                return self._fail(final_error)

        self.state = DeletionState.DELETED
        return self.state

    def _fail(self, err: BaseException) -> DeletionState:
        self.state = DeletionState.FAILED
        self.error = err
        return self.state


def sweep_vpcs(
    client: AWSClient,
    timeout: float = DELETE_TIMEOUT,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> SweepReport:
    """
    Delete every non-default VPC in the client's region.

    Args:
        client: AWSClient for the region to sweep
        timeout: Dependency-violation retry budget per VPC, in seconds
        clock: Monotonic clock used for the retry budget
        sleep: Sleep function used between retries

    Returns:
        SweepReport listing deleted and skipped VPCs

    Raises:
        SweepError: If any VPC could not be deleted (carries the report)
        TfaccError: If VPCs could not be listed for a reason other than
            the API being unavailable in this region
    """
    region = client.region
    report = SweepReport(region=region, resource_type="aws_vpc")
    errors = []

    try:
        paginator = client.ec2.get_paginator("describe_vpcs")
        for page in paginator.paginate():
            for vpc in page.get("Vpcs") or []:
                if vpc is None:
                    continue

                vpc_id = vpc["VpcId"]

                if vpc.get("IsDefault"):
                    logger.debug(f"Skipping default EC2 VPC: {vpc_id}")
                    report.skipped.append(vpc_id)
                    continue

                logger.info(f"Deleting EC2 VPC: {vpc_id}")

                deletion = VpcDeletion(client.ec2, vpc_id, timeout=timeout, clock=clock, sleep=sleep)
                if deletion.run() is DeletionState.DELETED:
                    report.deleted.append(vpc_id)
                    continue

                sweeper_err = TfaccError(f"error deleting EC2 VPC ({vpc_id}): {deletion.error}")
                sweeper_err.__cause__ = deletion.error
                logger.error(str(sweeper_err))
                report.failed[vpc_id] = str(deletion.error)
                errors.append(sweeper_err)

    except (ClientError, BotoCoreError) as e:
        if is_skip_sweep_error(e):
            logger.warning(f"Skipping EC2 VPC sweep for {region}: {e}")
            report.sweep_skipped = str(e)
            return report
        raise TfaccError(f"Error describing vpcs: {e}") from e

    if errors:
        raise SweepError(errors, report=report)

    return report

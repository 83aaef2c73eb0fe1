"""
Bounded retry with an explicit state machine and injectable clock.
"""

import logging
import time
from enum import Enum
from typing import Any, Callable, Optional

from .errors import RetryTimeoutError

logger = logging.getLogger(__name__)


class RetryState(Enum):
    """Retry lifecycle states."""
    PENDING = "pending"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RetryableError(Exception):
    """Raised by a retried function to ask for another attempt."""

    def __init__(self, err: BaseException):
        super().__init__(str(err))
        self.err = err


class NonRetryableError(Exception):
    """Raised by a retried function to stop retrying immediately."""

    def __init__(self, err: BaseException):
        super().__init__(str(err))
        self.err = err


class Retrier:
    """
    Runs a function until it succeeds, fails non-retryably, or time runs out.

    Delays start at min_delay and double up to max_delay; a sleep never
    extends past the deadline. The clock and sleep functions are injectable
    so the timeout boundary can be tested without waiting.
    """

    def __init__(
        self,
        timeout: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        min_delay: float = 0.5,
        max_delay: float = 10.0,
    ):
        self.timeout = timeout
        self.clock = clock
        self.sleep = sleep
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.state = RetryState.PENDING
        self.attempts = 0
        self.last_error: Optional[BaseException] = None

    def run(self, func: Callable[[], Any]) -> Any:
        """
        Run func under the retry policy.

        Args:
            func: Callable raising RetryableError or NonRetryableError on failure

        Returns:
            Whatever func returns on success

        Raises:
            RetryTimeoutError: If the deadline passes while retrying
            BaseException: The wrapped error of a NonRetryableError, or any
                other exception func raises
        """
        self.state = RetryState.PENDING
        self.attempts = 0
        self.last_error = None

        deadline = self.clock() + self.timeout
        delay = self.min_delay

        while True:
            self.attempts += 1
            try:
                result = func()
            except RetryableError as e:
                self.last_error = e.err
                now = self.clock()
                if now >= deadline:
                    self.state = RetryState.FAILED
                    raise RetryTimeoutError(self.timeout, self.last_error)

                self.state = RetryState.RETRYING
                logger.debug(f"Retryable error (attempt {self.attempts}): {e.err}")
                self.sleep(min(delay, deadline - now))
                delay = min(delay * 2, self.max_delay)
                continue
            except NonRetryableError as e:
                self.last_error = e.err
                self.state = RetryState.FAILED
                raise e.err
            except Exception as e:
                self.last_error = e
                self.state = RetryState.FAILED
                raise

            self.state = RetryState.SUCCEEDED
            return result


def retry(timeout: float, func: Callable[[], Any], **kwargs) -> Any:
    """Run func with a fresh Retrier; see Retrier for keyword arguments."""
    return Retrier(timeout, **kwargs).run(func)


def is_resource_timeout_error(err: Optional[BaseException]) -> bool:
    return isinstance(err, RetryTimeoutError)

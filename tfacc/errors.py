"""
Error taxonomy for EC2 API failures and package exceptions.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from botocore.exceptions import ClientError, EndpointConnectionError


class ErrorKind(Enum):
    """Classes of API failure the suite reacts to differently."""
    NOT_FOUND = "not_found"
    DEPENDENCY_VIOLATION = "dependency_violation"
    UNSUPPORTED = "unsupported"
    OTHER = "other"


@dataclass
class ErrorRule:
    """Maps an AWS error code (and optional message pattern) to a kind."""
    code: str
    kind: ErrorKind
    message: Optional[str] = None  # regex searched in the error message


ERROR_RULES: List[ErrorRule] = [
    ErrorRule(code="InvalidVpcID.NotFound", kind=ErrorKind.NOT_FOUND),
    ErrorRule(code="DependencyViolation", kind=ErrorKind.DEPENDENCY_VIOLATION),
    # Missing API endpoints
    ErrorRule(code="RequestError", kind=ErrorKind.UNSUPPORTED, message=r"send request failed"),
    ErrorRule(code="UnsupportedOperation", kind=ErrorKind.UNSUPPORTED),
    ErrorRule(
        code="InvalidParameterValue",
        kind=ErrorKind.UNSUPPORTED,
        message=r"not permitted in this API version for your account",
    ),
    ErrorRule(
        code="InvalidParameterValue",
        kind=ErrorKind.UNSUPPORTED,
        message=r"Access Denied to API Version",
    ),
    # GovCloud endpoints answer with an empty message
    ErrorRule(code="AccessDeniedException", kind=ErrorKind.UNSUPPORTED),
    ErrorRule(code="BadRequestException", kind=ErrorKind.UNSUPPORTED, message=r"not supported"),
    ErrorRule(code="InvalidAction", kind=ErrorKind.UNSUPPORTED, message=r"is not valid"),
    ErrorRule(code="InvalidAction", kind=ErrorKind.UNSUPPORTED, message=r"Unavailable Operation"),
]


class TfaccError(Exception):
    """Base class for all tfacc errors."""


class ConfigurationError(TfaccError):
    """Settings or credentials could not be resolved."""


class CheckError(TfaccError, AssertionError):
    """A test check failed."""

    def __init__(self, message: str, expected: Optional[str] = None, actual: Optional[str] = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class TerraformError(TfaccError):
    """A terraform CLI command exited non-zero."""

    def __init__(self, command: List[str], returncode: int, last_lines: Optional[List[str]] = None):
        self.command = command
        self.returncode = returncode
        self.last_lines = last_lines or []
        message = f"terraform command failed ({returncode}): {' '.join(command)}"
        if self.last_lines:
            message += "\n" + "\n".join(self.last_lines)
        super().__init__(message)


class RetryTimeoutError(TfaccError):
    """The retry budget ran out while the operation kept failing retryably."""

    def __init__(self, timeout: float, last_error: Optional[BaseException] = None):
        self.timeout = timeout
        self.last_error = last_error
        message = f"timeout while waiting for state to become 'success' (timeout: {timeout}s)"
        if last_error is not None:
            message += f", last error: {last_error}"
        super().__init__(message)


class SweepError(TfaccError):
    """Aggregate of per-resource sweep failures."""

    def __init__(self, errors: List[BaseException], report: Optional[Any] = None):
        self.errors = list(errors)
        self.report = report
        super().__init__(self._format())

    def _format(self) -> str:
        if len(self.errors) == 1:
            header = "1 error occurred:"
        else:
            header = f"{len(self.errors)} errors occurred:"
        lines = [header] + [f"\t* {err}" for err in self.errors]
        return "\n".join(lines)


def error_code(err: BaseException) -> str:
    """Return the AWS error code carried by err, or ''."""
    if isinstance(err, ClientError):
        return err.response.get("Error", {}).get("Code", "") or ""
    if isinstance(err, EndpointConnectionError):
        return "RequestError"
    return ""


def error_message(err: BaseException) -> str:
    """Return the AWS error message carried by err, or ''."""
    if isinstance(err, ClientError):
        return err.response.get("Error", {}).get("Message", "") or ""
    if isinstance(err, EndpointConnectionError):
        return f"send request failed: {err}"
    return ""


def classify_error(err: Optional[BaseException]) -> ErrorKind:
    """
    Classify an exception into an ErrorKind using ERROR_RULES.

    Args:
        err: Exception raised by a boto3 call

    Returns:
        The matching kind, or ErrorKind.OTHER
    """
    if err is None:
        return ErrorKind.OTHER

    code = error_code(err)
    if not code:
        return ErrorKind.OTHER

    message = error_message(err)
    for rule in ERROR_RULES:
        if rule.code != code:
            continue
        if rule.message is None or re.search(rule.message, message):
            return rule.kind

    return ErrorKind.OTHER


def is_skip_sweep_error(err: Optional[BaseException]) -> bool:
    """True if a sweep should be skipped rather than failed for err."""
    return classify_error(err) is ErrorKind.UNSUPPORTED

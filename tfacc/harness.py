"""
Step-sequencing acceptance test driver.

A TestCase is an ordered list of TestSteps. Config steps write the step's
configuration, apply it, run the step's check against the resulting state
and then plan again to make sure the configuration converged. Import steps
import the tracked resource into a scratch directory and compare attributes.
Whatever happens, the case ends with a destroy followed by check_destroy.
"""

import logging
import re
import unittest
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Pattern, Union

from .client import AWSClient
from .errors import CheckError, ConfigurationError
from .events import EventTypes, emit_event
from .ids import new_run_id
from .settings import Settings
from .state import ResourceState, TerraformState, cleanup_run, create_run_dir
from .terraform import TerraformRunner, terraform_env

logger = logging.getLogger(__name__)

Check = Callable[[TerraformState], None]
RunnerFactory = Callable[..., TerraformRunner]


@dataclass
class TestStep:
    """One step of a TestCase: a config step or an import step."""
    __test__ = False  # keep pytest from collecting this class

    config: str = ""
    check: Optional[Check] = None
    expect_non_empty_plan: bool = False
    plan_only: bool = False
    # Import steps
    resource_name: str = ""
    import_state: bool = False
    import_state_verify: bool = False
    import_state_verify_ignore: List[str] = field(default_factory=list)
    import_state_id: str = ""


@dataclass
class TestCase:
    """Ordered steps plus the hooks run before and after them."""
    __test__ = False

    steps: List[TestStep]
    pre_check: Optional[Callable[[], None]] = None
    check_destroy: Optional[Check] = None
    name: str = ""


# Check combinators

def compose_check(*checks: Check) -> Check:
    """Run checks in order, stopping at the first failure."""
    def check(state: TerraformState) -> None:
        for index, fn in enumerate(checks):
            try:
                fn(state)
            except CheckError as e:
                raise CheckError(f"Check {index + 1}/{len(checks)} error: {e}", e.expected, e.actual) from e

    return check


def compose_aggregate_check(*checks: Check) -> Check:
    """Run every check and report all failures together."""
    def check(state: TerraformState) -> None:
        failures = []
        for index, fn in enumerate(checks):
            try:
                fn(state)
            except Exception as e:
                # EC2 errors from live checks count as failures too
                failures.append(f"Check {index + 1}/{len(checks)} error: {e}")

        if failures:
            raise CheckError("\n".join(failures))

    return check


def _primary(state: TerraformState, name: str) -> ResourceState:
    rs = state.root_module().resources.get(name)
    if rs is None:
        raise CheckError(f"Not found: {name} in {sorted(state.resources)}")
    return rs


def check_resource_attr(name: str, key: str, value: str) -> Check:
    """
    Require a flat attribute to equal value.

    A missing attribute matches "" and, for ``.#``/``.%`` counts, "0".
    """
    def check(state: TerraformState) -> None:
        rs = _primary(state, name)
        actual = rs.attributes.get(key)

        if actual is None:
            if value == "" or (value == "0" and key.endswith((".#", ".%"))):
                return
            raise CheckError(f"{name}: Attribute '{key}' not found", expected=value)

        if actual != value:
            raise CheckError(
                f"{name}: Attribute '{key}' expected {value!r}, got {actual!r}",
                expected=value,
                actual=actual,
            )

    return check


def match_resource_attr(name: str, key: str, pattern: Union[str, Pattern]) -> Check:
    """Require a flat attribute to match a regular expression."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern

    def check(state: TerraformState) -> None:
        rs = _primary(state, name)
        actual = rs.attributes.get(key, "")

        if not regex.search(actual):
            raise CheckError(
                f"{name}: Attribute '{key}' didn't match {regex.pattern!r}, got {actual!r}",
                expected=regex.pattern,
                actual=actual,
            )

    return check


def check_resource_attr_account_id(client: AWSClient, name: str, key: str) -> Check:
    def check(state: TerraformState) -> None:
        check_resource_attr(name, key, client.account_id)(state)

    return check


def match_resource_attr_regional_arn(
    client: AWSClient,
    name: str,
    key: str,
    service: str,
    resource_pattern: Union[str, Pattern],
) -> Check:
    """Require an ARN attribute in the client's partition, region and account."""
    regex = re.compile(resource_pattern) if isinstance(resource_pattern, str) else resource_pattern

    def check(state: TerraformState) -> None:
        rs = _primary(state, name)
        actual = rs.attributes.get(key, "")
        parts = actual.split(":", 5)

        if len(parts) != 6 or parts[0] != "arn":
            raise CheckError(f"{name}: Attribute '{key}' is not an ARN: {actual!r}", actual=actual)

        expected = [client.partition, service, client.region, client.account_id]
        if parts[1:5] != expected or not regex.fullmatch(parts[5]):
            raise CheckError(
                f"{name}: Attribute '{key}' expected ARN "
                f"arn:{':'.join(expected)}:{regex.pattern}, got {actual!r}",
                expected=regex.pattern,
                actual=actual,
            )

    return check


def pre_check(settings: Settings, client: AWSClient) -> None:
    """
    Verify the environment can run acceptance tests.

    Raises:
        unittest.SkipTest: If the terraform binary is missing
        ConfigurationError: If no AWS credentials resolve
    """
    if not settings.terraform_available():
        raise unittest.SkipTest(f"terraform binary not found: {settings.terraform_path}")

    if client.session.get_credentials() is None:
        raise ConfigurationError("AWS credentials must be set for acceptance tests")


def _comparable(attributes: Dict[str, str], ignore: List[str]) -> Dict[str, str]:
    result = {}
    for key, value in attributes.items():
        if any(key.startswith(prefix) for prefix in ignore):
            continue
        if key.startswith("timeouts"):
            continue
        if key.endswith((".#", ".%")) and value == "0":
            continue
        result[key] = value
    return result


def verify_import(expected: ResourceState, imported: Optional[ResourceState], ignore: List[str]) -> None:
    """
    Compare imported attributes with applied ones.

    Keys starting with any entry of ignore are left out of the comparison.

    Raises:
        CheckError: If the resource was not imported or attributes differ
    """
    if imported is None:
        raise CheckError(f"ImportStateVerify: resource {expected.address} not found after import")

    want = _comparable(expected.attributes, ignore)
    got = _comparable(imported.attributes, ignore)
    if want == got:
        return

    diffs = []
    for key in sorted(set(want) | set(got)):
        if want.get(key) != got.get(key):
            diffs.append(f"  {key}: applied={want.get(key)!r} imported={got.get(key)!r}")

    raise CheckError(
        "ImportStateVerify attributes not equivalent:\n" + "\n".join(diffs),
        expected=str(want),
        actual=str(got),
    )


class Harness:
    """Runs TestCases against the terraform CLI inside a run directory."""

    def __init__(self, settings: Settings, runner_factory: RunnerFactory = TerraformRunner):
        self.settings = settings
        self.runner_factory = runner_factory

    def runner_env(self) -> Dict[str, str]:
        """
        Environment for terraform, pinned to the region and profile the
        checks use so both sides look at the same VPCs.
        """
        extra = {
            "AWS_REGION": self.settings.region,
            "AWS_DEFAULT_REGION": self.settings.region,
        }
        if self.settings.profile:
            extra["AWS_PROFILE"] = self.settings.profile
        return terraform_env(extra)

    def _runner(self, work_dir: Path, run_dir: Path) -> TerraformRunner:
        return self.runner_factory(
            work_dir,
            binary=self.settings.terraform_path,
            env=self.runner_env(),
            log_dir=run_dir,
        )

    def run(self, case: TestCase) -> None:
        """
        Run a TestCase.

        Raises:
            unittest.SkipTest: If TF_ACC is not set
            CheckError: On the first failing step
            TerraformError: If a terraform command fails
        """
        if not self.settings.acceptance:
            raise unittest.SkipTest("Acceptance tests skipped unless env 'TF_ACC' set")

        if case.pre_check:
            case.pre_check()

        run_id = new_run_id()
        run_dir = create_run_dir(run_id, self.settings)
        runner = self._runner(run_dir / "work", run_dir)

        logger.info(f"Running {case.name or 'test case'} in {run_dir}")
        emit_event(run_dir, EventTypes.CASE_START, {"name": case.name, "steps": len(case.steps)})

        state = TerraformState()
        try:
            state = self._run_steps(case, runner, run_dir)
        except Exception as e:
            emit_event(run_dir, EventTypes.ERROR, {"reason": str(e)})
            try:
                self._destroy(case, runner, run_dir, state)
            except Exception as destroy_error:
                logger.error(f"Error destroying resources after failure in {run_dir}: {destroy_error}")
            raise

        self._destroy(case, runner, run_dir, state)
        emit_event(run_dir, EventTypes.CASE_DONE, {"ok": True})

        if not self.settings.keep_runs:
            cleanup_run(run_id, self.settings)

    def _run_steps(self, case: TestCase, runner: TerraformRunner, run_dir: Path) -> TerraformState:
        state = TerraformState()
        config = ""

        for index, step in enumerate(case.steps, 1):
            emit_event(run_dir, EventTypes.STEP_START, {"step": index, "import": step.import_state})

            if step.import_state:
                self._run_import_step(index, step, state, config, run_dir)
                continue

            config = step.config
            state = self._run_config_step(index, step, runner, run_dir, state)

        return state

    def _run_config_step(
        self,
        index: int,
        step: TestStep,
        runner: TerraformRunner,
        run_dir: Path,
        state: TerraformState,
    ) -> TerraformState:
        runner.write_config(step.config)

        if not step.plan_only:
            runner.apply()
            state = runner.show()

            if step.check:
                try:
                    step.check(state)
                except Exception as e:
                    emit_event(run_dir, EventTypes.CHECK_FAILED, {"step": index, "error": str(e)})
                    logger.error(f"Step {index} check failed: {e}")
                    raise
                emit_event(run_dir, EventTypes.CHECK_OK, {"step": index})

        non_empty = runner.plan()
        if non_empty and not step.expect_non_empty_plan:
            when = "planning" if step.plan_only else "applying"
            raise CheckError(f"Step {index} error: After {when} this step, the plan was not empty.")

        return state

    def _run_import_step(
        self,
        index: int,
        step: TestStep,
        state: TerraformState,
        config: str,
        run_dir: Path,
    ) -> None:
        rs = state.root_module().resources.get(step.resource_name)
        if rs is None:
            raise CheckError(f"Step {index} error: {step.resource_name} not found in state")

        import_id = step.import_state_id or rs.id

        # The scratch state shares the live resource and is never destroyed
        scratch = self._runner(run_dir / f"import-{index}", run_dir)
        scratch.write_config(config)
        scratch.import_resource(step.resource_name, import_id)
        imported = scratch.show()

        if step.import_state_verify:
            verify_import(rs, imported.resources.get(step.resource_name), step.import_state_verify_ignore)
            emit_event(run_dir, EventTypes.IMPORT_VERIFIED, {"step": index, "id": import_id})

    def _destroy(self, case: TestCase, runner: TerraformRunner, run_dir: Path, state: TerraformState) -> None:
        # check_destroy needs the pre-destroy state to know what to look for
        if runner.initialized:
            state = runner.show()
            runner.destroy()

        if case.check_destroy:
            case.check_destroy(state)
            emit_event(run_dir, EventTypes.CHECK_DESTROY_OK, {})


def run_test(case: TestCase, settings: Optional[Settings] = None, runner_factory: RunnerFactory = TerraformRunner) -> None:
    """Run a TestCase with settings from the environment by default."""
    Harness(settings or Settings.from_env(), runner_factory).run(case)


def parallel_test(case: TestCase, settings: Optional[Settings] = None, runner_factory: RunnerFactory = TerraformRunner) -> None:
    """
    Run a TestCase that may share the account with other cases.

    Each case gets its own run directory and resource state, so concurrent
    invocations never collide on disk.
    """
    run_test(case, settings, runner_factory)

"""
Terraform CLI wrapper used by the acceptance harness.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .errors import TerraformError
from .events import EventTypes, emit_event
from .state import TerraformState

logger = logging.getLogger(__name__)

CONFIG_FILE = "main.tf"
LOG_FILE = "terraform.log"


def terraform_env(extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Environment for terraform commands: non-interactive, automation mode."""
    env = os.environ.copy()
    env["TF_IN_AUTOMATION"] = "1"
    env["TF_INPUT"] = "0"
    if extra:
        env.update(extra)
    return env


class TerraformRunner:
    """Runs terraform commands inside one working directory."""

    def __init__(
        self,
        work_dir: Path,
        binary: str = "terraform",
        env: Optional[Dict[str, str]] = None,
        log_dir: Optional[Path] = None,
    ):
        self.work_dir = Path(work_dir)
        self.binary = binary
        self.env = env if env is not None else terraform_env()
        self.log_dir = Path(log_dir) if log_dir else self.work_dir
        self.initialized = False

    def _run(self, args: List[str], ok_codes: Tuple[int, ...] = (0,)) -> Tuple[int, str]:
        """
        Run a terraform command and append its output to terraform.log.

        Args:
            args: Arguments after the binary name
            ok_codes: Exit codes that count as success

        Returns:
            Tuple of (exit code, output)

        Raises:
            TerraformError: If the exit code is not in ok_codes
        """
        command = [self.binary, *args]
        terraform_log = self.log_dir / LOG_FILE
        logger.debug(f"Running {' '.join(command)} in {self.work_dir}")

        process = subprocess.Popen(
            command,
            cwd=self.work_dir,
            env=self.env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
        )

        output_lines = []
        with open(terraform_log, "a") as log_file:
            log_file.write(f"=== {' '.join(command)} ===\n")

            for line in process.stdout:
                line = line.rstrip()
                output_lines.append(line)
                log_file.write(line + "\n")
                log_file.flush()

        process.wait()
        output = "\n".join(output_lines)

        if process.returncode not in ok_codes:
            raise TerraformError(command, process.returncode, output_lines[-40:])

        return process.returncode, output

    def write_config(self, config: str) -> Path:
        """Write configuration text to main.tf, replacing any previous one."""
        self.work_dir.mkdir(parents=True, exist_ok=True)
        config_file = self.work_dir / CONFIG_FILE
        config_file.write_text(config)
        return config_file

    def init(self) -> None:
        self._run(["init", "-input=false", "-no-color"])
        self.initialized = True
        emit_event(self.log_dir, EventTypes.TF_INIT, {"work_dir": str(self.work_dir)})

    def _ensure_init(self) -> None:
        if not self.initialized:
            self.init()

    def apply(self) -> None:
        self._ensure_init()
        self._run(["apply", "-input=false", "-auto-approve", "-no-color"])
        emit_event(self.log_dir, EventTypes.TF_APPLY_DONE, {"ok": True})

    def plan(self) -> bool:
        """
        Run terraform plan.

        Returns:
            True if the plan is non-empty
        """
        self._ensure_init()
        returncode, output = self._run(
            ["plan", "-input=false", "-no-color", "-detailed-exitcode"],
            ok_codes=(0, 2),
        )
        non_empty = returncode == 2

        emit_event(self.log_dir, EventTypes.TF_PLAN, {
            "adds": output.count("will be created"),
            "changes": output.count("will be updated in-place"),
            "replaces": output.count("must be replaced"),
            "destroys": output.count("will be destroyed"),
            "non_empty": non_empty,
        })

        return non_empty

    def import_resource(self, address: str, resource_id: str) -> None:
        self._ensure_init()
        self._run(["import", "-input=false", "-no-color", address, resource_id])

    def destroy(self) -> None:
        self._ensure_init()
        self._run(["destroy", "-input=false", "-auto-approve", "-no-color"])
        emit_event(self.log_dir, EventTypes.DESTROY_DONE, {"ok": True})

    def show(self) -> TerraformState:
        """Read the current state through ``terraform show -json``."""
        self._ensure_init()
        command = [self.binary, "show", "-json", "-no-color"]

        # stdout only: warnings on stderr would break the JSON document
        result = subprocess.run(
            command,
            cwd=self.work_dir,
            env=self.env,
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise TerraformError(command, result.returncode, result.stderr.splitlines()[-40:])

        return TerraformState.from_show_output(result.stdout)

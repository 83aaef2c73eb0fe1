"""
Environment-driven settings for acceptance runs and sweeps.
"""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

DEFAULT_REGION = "us-west-2"


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Process-wide options, resolved once and passed around explicitly."""
    region: str = DEFAULT_REGION
    profile: Optional[str] = None
    home: Path = field(default_factory=lambda: Path(".tfacc").resolve())
    terraform_path: str = "terraform"
    acceptance: bool = False
    sweep_regions: List[str] = field(default_factory=list)
    sweep_filter: List[str] = field(default_factory=list)
    keep_runs: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            Settings instance
        """
        env = os.environ if environ is None else environ

        region = env.get("AWS_DEFAULT_REGION") or env.get("AWS_REGION") or DEFAULT_REGION

        return cls(
            region=region,
            profile=env.get("AWS_PROFILE") or None,
            home=Path(env.get("TFACC_HOME", ".tfacc")).resolve(),
            terraform_path=env.get("TF_ACC_TERRAFORM_PATH") or "terraform",
            acceptance=bool(env.get("TF_ACC")),
            sweep_regions=_split_csv(env.get("SWEEP")),
            sweep_filter=_split_csv(env.get("SWEEP_RUN")),
            keep_runs=bool(env.get("TF_ACC_KEEP_RUNS")),
        )

    def terraform_available(self) -> bool:
        """True if the configured terraform binary can be found."""
        return shutil.which(self.terraform_path) is not None

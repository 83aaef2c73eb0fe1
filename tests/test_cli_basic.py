"""
Basic tests for the tfacc command line.
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from tfacc.cli import main
from tfacc.configs import VPC_CONFIG
from tfacc.errors import SweepError, TfaccError
from tfacc.events import EventTypes, emit_event
from tfacc.settings import Settings
from tfacc.state import create_run_dir
from tfacc.sweep import SweepReport


@pytest.fixture
def cli(monkeypatch, tmp_path):
    for name in ("SWEEP", "SWEEP_RUN", "TF_ACC"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TFACC_HOME", str(tmp_path))
    return CliRunner()


class TestSweepCommand:
    """Test the sweep command."""

    def test_requires_region(self, cli):
        result = cli.invoke(main, ["sweep"])

        assert result.exit_code == 2
        assert "No regions to sweep" in result.output

    def test_text_output(self, cli):
        report = SweepReport(region="us-west-2", resource_type="aws_vpc", deleted=["vpc-1"], skipped=["vpc-d"])

        with patch("tfacc.cli.run_sweepers", return_value={"us-west-2": {"aws_vpc": report}}) as run:
            result = cli.invoke(main, ["sweep", "--region", "us-west-2", "--sweeper", "aws_vpc"])

        assert result.exit_code == 0
        assert "us-west-2 aws_vpc: deleted 1, kept 1 default(s)" in result.output
        assert run.call_args.args[0] == ["us-west-2"]
        assert run.call_args.kwargs["only"] == ["aws_vpc"]

    def test_regions_from_env(self, cli, monkeypatch):
        monkeypatch.setenv("SWEEP", "us-east-1,us-east-2")

        with patch("tfacc.cli.run_sweepers", return_value={}) as run:
            result = cli.invoke(main, ["sweep"])

        assert result.exit_code == 0
        assert run.call_args.args[0] == ["us-east-1", "us-east-2"]

    def test_json_failure(self, cli):
        report = SweepReport(region="us-west-2", resource_type="aws_vpc", failed={"vpc-1": "stuck"})
        err = SweepError([TfaccError("error deleting EC2 VPC (vpc-1): stuck")], report={"us-west-2": {"aws_vpc": report}})

        with patch("tfacc.cli.run_sweepers", side_effect=err):
            result = cli.invoke(main, ["--json", "sweep", "--region", "us-west-2"])

        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["ok"] is False
        assert "1 error occurred" in payload["error"]
        assert payload["results"]["us-west-2"]["aws_vpc"]["failed"] == {"vpc-1": "stuck"}

    def test_unknown_sweeper(self, cli):
        with patch("tfacc.cli.run_sweepers", side_effect=TfaccError("No sweepers found for: nope")):
            result = cli.invoke(main, ["sweep", "--region", "us-west-2", "--sweeper", "nope"])

        assert result.exit_code == 1
        assert "No sweepers found for: nope" in result.output


class TestOtherCommands:
    """Test listing and fixture commands."""

    def test_sweepers(self, cli):
        result = cli.invoke(main, ["sweepers"])

        assert result.exit_code == 0
        assert "aws_vpc (depends on:" in result.output
        assert "aws_subnet" in result.output

    def test_sweepers_json(self, cli):
        result = cli.invoke(main, ["--json", "sweepers"])

        names = [s["name"] for s in json.loads(result.output)["sweepers"]]
        assert "aws_vpc" in names

    def test_config(self, cli):
        result = cli.invoke(main, ["config", "basic"])

        assert result.exit_code == 0
        assert VPC_CONFIG.strip() in result.output

    def test_config_unknown(self, cli):
        result = cli.invoke(main, ["config", "nope"])
        assert result.exit_code == 2

    def test_runs_and_clean(self, cli, tmp_path):
        run_dir = create_run_dir("r-20240101-120000-abcd", Settings(home=tmp_path))
        emit_event(run_dir, EventTypes.CASE_START, {})
        emit_event(run_dir, EventTypes.CASE_DONE, {"ok": True})

        result = cli.invoke(main, ["--json", "runs"])
        assert json.loads(result.output) == {"runs": [{"id": "r-20240101-120000-abcd", "outcome": "passed"}]}

        result = cli.invoke(main, ["clean-runs"])
        assert "Removed 1 run(s)" in result.output

        result = cli.invoke(main, ["runs"])
        assert "No runs found" in result.output

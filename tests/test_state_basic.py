"""
Basic tests for run directories, events and Terraform state views.
"""

import json
from datetime import datetime

import pytest

from tfacc.events import EventTypes, emit_event, read_events, run_outcome
from tfacc.ids import is_valid_run_id, new_run_id
from tfacc.settings import Settings
from tfacc.state import (
    TerraformState,
    cleanup_run,
    create_run_dir,
    flatten_attributes,
    get_run_dir,
    list_runs,
)


SHOW_JSON = {
    "format_version": "1.0",
    "values": {
        "root_module": {
            "resources": [
                {
                    "address": "aws_vpc.test",
                    "mode": "managed",
                    "type": "aws_vpc",
                    "name": "test",
                    "values": {
                        "id": "vpc-0abc",
                        "cidr_block": "10.1.0.0/16",
                        "enable_dns_support": True,
                        "enable_classiclink": False,
                        "ipv6_cidr_block": None,
                        "tags": {"Name": "terraform-testacc-vpc-tags", "foo": "bar"},
                    },
                },
                {
                    "address": "data.aws_region.current",
                    "mode": "data",
                    "type": "aws_region",
                    "name": "current",
                    "values": {"name": "us-west-2"},
                },
            ]
        }
    },
}


class TestIds:
    """Test run ID generation."""

    def test_new_run_id_valid(self):
        run_id = new_run_id()
        assert is_valid_run_id(run_id)
        assert run_id.startswith("r-")

    def test_new_run_id_uses_time(self):
        run_id = new_run_id(datetime(2024, 3, 5, 7, 8, 9))
        assert run_id.startswith("r-20240305-070809-")

    @pytest.mark.parametrize("run_id", ["", "x-20240101-120000-abcd", "r-2024-120000-abcd", "r-20240101-120000-ab"])
    def test_invalid(self, run_id):
        assert not is_valid_run_id(run_id)


class TestRunDirs:
    """Test run directory management under TFACC_HOME."""

    def test_create_list_cleanup(self, tmp_path):
        settings = Settings(home=tmp_path)
        older = "r-20240101-120000-aaaa"
        newer = "r-20240102-120000-bbbb"

        create_run_dir(older, settings)
        create_run_dir(newer, settings)
        (tmp_path / "not-a-run").mkdir()

        assert list_runs(settings) == [newer, older]

        cleanup_run(older, settings)
        assert list_runs(settings) == [newer]

    def test_missing_home(self, tmp_path):
        assert list_runs(Settings(home=tmp_path / "missing")) == []

    def test_invalid_run_id(self, tmp_path):
        with pytest.raises(ValueError):
            get_run_dir("../escape", Settings(home=tmp_path))


class TestEvents:
    """Test NDJSON event logs."""

    def test_emit_and_read(self, tmp_path):
        emit_event(tmp_path, EventTypes.CASE_START, {"name": "vpc_basic"})
        emit_event(tmp_path, EventTypes.CASE_DONE, {"ok": True})

        events = read_events(tmp_path)
        assert [e["type"] for e in events] == ["CASE_START", "CASE_DONE"]
        assert events[0]["data"] == {"name": "vpc_basic"}

    def test_malformed_lines_skipped(self, tmp_path):
        emit_event(tmp_path, EventTypes.ERROR, {"reason": "x"})
        with open(tmp_path / "logs.ndjson", "a") as f:
            f.write("{not json\n")

        assert len(read_events(tmp_path)) == 1

    def test_no_log(self, tmp_path):
        assert read_events(tmp_path) == []

    def test_run_outcome(self, tmp_path):
        assert run_outcome(tmp_path) == "unknown"

        emit_event(tmp_path, EventTypes.CASE_START, {})
        assert run_outcome(tmp_path) == "running"

        emit_event(tmp_path, EventTypes.CASE_DONE, {"ok": True})
        assert run_outcome(tmp_path) == "passed"

        emit_event(tmp_path, EventTypes.ERROR, {"reason": "x"})
        assert run_outcome(tmp_path) == "failed"


class TestFlatten:
    """Test flatmap conversion."""

    def test_scalars(self):
        flat = flatten_attributes({"a": True, "b": False, "c": None, "d": 3, "e": 2.0, "f": "x"})
        assert flat == {"a": "true", "b": "false", "c": "", "d": "3", "e": "2", "f": "x"}

    def test_map_and_list(self):
        flat = flatten_attributes({
            "tags": {"Name": "x"},
            "cidrs": ["10.0.0.0/16", "10.1.0.0/16"],
            "blocks": [{"id": "a"}],
            "empty": [],
        })

        assert flat["tags.%"] == "1"
        assert flat["tags.Name"] == "x"
        assert flat["cidrs.#"] == "2"
        assert flat["cidrs.1"] == "10.1.0.0/16"
        assert flat["blocks.0.id"] == "a"
        assert flat["empty.#"] == "0"


class TestTerraformState:
    """Test parsing `terraform show -json` output."""

    def test_from_show_json(self):
        state = TerraformState.from_show_json(SHOW_JSON)

        assert list(state.resources) == ["aws_vpc.test"]
        rs = state.root_module().resources["aws_vpc.test"]
        assert rs.id == "vpc-0abc"
        assert rs.type == "aws_vpc"
        assert rs.attributes["enable_dns_support"] == "true"
        assert rs.attributes["ipv6_cidr_block"] == ""
        assert rs.attributes["tags.%"] == "2"
        assert rs.attributes["tags.foo"] == "bar"

    def test_by_type(self):
        state = TerraformState.from_show_json(SHOW_JSON)

        assert [r.address for r in state.by_type("aws_vpc")] == ["aws_vpc.test"]
        assert list(state.by_type("aws_subnet")) == []

    def test_empty_outputs(self):
        assert TerraformState.from_show_output("").resources == {}
        assert TerraformState.from_show_output(json.dumps({"format_version": "1.0"})).resources == {}
        assert TerraformState.from_show_output(json.dumps(SHOW_JSON)).resources["aws_vpc.test"].name == "test"

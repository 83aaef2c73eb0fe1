"""
Per-run event log in NDJSON format.

Every harness and terraform milestone is appended to <run_dir>/logs.ndjson
so a kept run directory shows how far a case got.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

LOGS_FILE = "logs.ndjson"


class EventTypes:
    CASE_START = "CASE_START"
    STEP_START = "STEP_START"
    TF_INIT = "TF_INIT"
    TF_APPLY_DONE = "TF_APPLY_DONE"
    TF_PLAN = "TF_PLAN"
    CHECK_OK = "CHECK_OK"
    CHECK_FAILED = "CHECK_FAILED"
    IMPORT_VERIFIED = "IMPORT_VERIFIED"
    DESTROY_DONE = "DESTROY_DONE"
    CHECK_DESTROY_OK = "CHECK_DESTROY_OK"
    ERROR = "ERROR"
    CASE_DONE = "CASE_DONE"


def emit_event(run_dir: Path, event_type: str, data: Dict[str, Any]) -> None:
    """
    Append one event to the run's log.

    Args:
        run_dir: Run directory (must exist)
        event_type: One of EventTypes
        data: JSON-serializable payload
    """
    event = {"ts": datetime.now().isoformat(), "type": event_type, "data": data}

    with open(Path(run_dir) / LOGS_FILE, "a") as f:
        f.write(json.dumps(event) + "\n")
        f.flush()


def read_events(run_dir: Path) -> List[Dict[str, Any]]:
    """Read a run's events in order, skipping lines that are not JSON."""
    logs_file = Path(run_dir) / LOGS_FILE

    if not logs_file.exists():
        return []

    events = []
    with open(logs_file) as f:
        for line in f:
            if not line.strip():
                continue
            try:
                events.append(json.loads(line))
            except json.JSONDecodeError:
                continue  # partial write

    return events


def run_outcome(run_dir: Path) -> str:
    """
    Summarize a run from its events.

    Returns:
        "passed", "failed", "running", or "unknown" when there is no log
    """
    types = [event.get("type") for event in read_events(run_dir)]

    if not types:
        return "unknown"
    if EventTypes.ERROR in types:
        return "failed"
    if types[-1] == EventTypes.CASE_DONE:
        return "passed"
    return "running"

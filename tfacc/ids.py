"""
Run IDs name the per-case working directories under TFACC_HOME.
"""

import random
import re
import string
from datetime import datetime
from typing import Optional

RUN_ID_PREFIX = "r-"

_RUN_ID_RE = re.compile(r"^r-(\d{8})-(\d{6})-([a-z0-9]{4})$")


def new_run_id(now: Optional[datetime] = None) -> str:
    """
    Generate a run ID: r-YYYYMMDD-hhmmss-xxxx.

    The random suffix keeps cases started in the same second apart.
    """
    now = now or datetime.now()
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return f"{RUN_ID_PREFIX}{now:%Y%m%d-%H%M%S}-{suffix}"


def is_valid_run_id(run_id: str) -> bool:
    return bool(_RUN_ID_RE.match(run_id))

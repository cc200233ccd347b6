#!/usr/bin/env python3
"""Entry point to rank items for the configured profile."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from jobmatch.config import PROFILE_PATH
from jobmatch.log import get_logger

log = get_logger(__name__)

MODES = ("hybrid", "diversified", "content", "priority", "bandit")


def _check_setup() -> bool:
    """Return True if the profile is missing."""
    if not PROFILE_PATH.exists():
        print()
        print("  No profile found. Copy config/profile.example.yaml to")
        print("    config/profile.yaml and edit it.")
        print()
        return True
    return False


if __name__ == "__main__":
    if _check_setup():
        sys.exit(1)

    mode = sys.argv[1] if len(sys.argv) > 1 else None
    if mode is not None and mode not in MODES:
        print(f"  Unknown mode {mode!r}; choose one of {', '.join(MODES)}")
        sys.exit(2)

    from jobmatch.engine import run

    result = run(mode=mode)
    log.info("Run complete.")
    log.info("  Mode: %s", result["mode"])
    log.info("  Items found: %d", result["items_found"])
    log.info("  Ranked: %d", result["ranked_count"])
    for item_id, score in result["top"]:
        log.info("    %s  %.1f", item_id, score)
    if result["report_path"]:
        log.info("  Report: %s", result["report_path"])

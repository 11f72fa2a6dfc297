"""Leaderboard snapshot collection.

Submodules:
- ``resolver``   — content database pages → tracked group identifiers
- ``metrics``    — one lookback window from the metrics API
- ``aggregator`` — all windows for one group merged into a snapshot
- ``job``        — the end-to-end run
"""

from .job import run_snapshot_job

__all__ = ["run_snapshot_job"]

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from ..schemas import Snapshot
from .base import BlobStore

logger = logging.getLogger(__name__)

SNAPSHOT_CONTENT_TYPE = "application/json"


def snapshot_key(group_id: str, business_date: str) -> str:
    if not group_id or "/" in group_id or "\\" in group_id or ".." in group_id:
        raise ValueError(f"group id is not a single key segment: {group_id!r}")
    return f"history/{group_id}/{business_date}.json"


def serialize_windows(windows: Dict[str, Any]) -> bytes:
    """Compact JSON of the windows map; identical input gives identical bytes."""
    return json.dumps(windows, ensure_ascii=False, separators=(",", ":")).encode(
        "utf-8"
    )


class SnapshotStore:
    """Writes snapshots to ``history/{groupId}/{businessDate}.json``.

    A rerun for the same business date replaces the previous object.
    """

    def __init__(self, blob_store: BlobStore) -> None:
        self.blob_store = blob_store

    async def save(self, snapshot: Snapshot) -> str:
        key = snapshot_key(snapshot.group_id, snapshot.business_date)
        url = await self.blob_store.put(
            key, serialize_windows(snapshot.windows), SNAPSHOT_CONTENT_TYPE
        )
        logger.info("Saved %s (keys: %s)", key, ", ".join(snapshot.windows))
        return url

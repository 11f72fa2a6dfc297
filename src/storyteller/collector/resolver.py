"""Entity resolution: content database pages → tracked group identifiers.

The group identifier has been stored under several property names and
property types over the life of the database.  Rather than probing ad hoc,
:data:`GROUP_ID_CANDIDATES` lists every accepted ``(field_name, field_kind)``
pair in priority order and :func:`resolve_group_id` returns the first
non-empty match.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..notion.client import NotionClient
from ..schemas import EntityRecord, TrackedEntity

logger = logging.getLogger(__name__)

GROUP_ID_FIELD_NAMES: Tuple[str, ...] = ("GroupID", "Group ID", "그룹ID")
GROUP_ID_FIELD_KINDS: Tuple[str, ...] = ("number", "rich_text", "title")

GROUP_ID_CANDIDATES: Tuple[Tuple[str, str], ...] = tuple(
    (name, kind) for name in GROUP_ID_FIELD_NAMES for kind in GROUP_ID_FIELD_KINDS
)


def _number_value(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not value:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _plain_text_value(value: Any) -> Optional[str]:
    if not isinstance(value, list):
        return None
    text = "".join(
        str(segment.get("plain_text") or "")
        for segment in value
        if isinstance(segment, dict)
    ).strip()
    return text or None


_EXTRACTORS = {
    "number": _number_value,
    "rich_text": _plain_text_value,
    "title": _plain_text_value,
}

# Characters that would break out of one URL path segment or one key segment.
_UNSAFE_GROUP_ID_PARTS: Tuple[str, ...] = ("/", "\\", "?", "#", "..")


def is_safe_group_id(group_id: str) -> bool:
    """True when *group_id* can be used as a single path/key segment."""
    return not any(part in group_id for part in _UNSAFE_GROUP_ID_PARTS)


def resolve_group_id(
    properties: Dict[str, Any],
    candidates: Sequence[Tuple[str, str]] = GROUP_ID_CANDIDATES,
) -> Optional[str]:
    """Return the normalized group identifier for a page, or ``None``."""
    for field_name, field_kind in candidates:
        prop = properties.get(field_name)
        if not isinstance(prop, dict):
            continue
        value = _EXTRACTORS[field_kind](prop.get(field_kind))
        if value:
            return value
    return None


def parse_entity_record(page: Dict[str, Any]) -> Optional[EntityRecord]:
    page_id = page.get("id")
    properties = page.get("properties")
    if not page_id or not isinstance(properties, dict):
        return None
    return EntityRecord(id=str(page_id), properties=properties)


async def _query_partition(
    notion: NotionClient, data_source_id: str
) -> List[Dict[str, Any]]:
    try:
        return await notion.query_data_source(data_source_id)
    except Exception as exc:
        logger.warning("Data source %s query failed: %s", data_source_id, exc)
        return []


async def fetch_pages(notion: NotionClient, database_id: str) -> List[Dict[str, Any]]:
    """Union the pages of every data source under *database_id*.

    Metadata failures propagate: without the partition list there is nothing
    meaningful to collect.  Individual partition failures only drop that
    partition's pages.
    """
    metadata = await notion.get_database(database_id)
    data_sources = [
        source
        for source in metadata.get("data_sources") or []
        if isinstance(source, dict) and source.get("id")
    ]

    if not data_sources:
        logger.info("Database %s exposes no data sources, using legacy query", database_id)
        try:
            return await notion.query_database(database_id)
        except Exception as exc:
            logger.warning("Legacy database query failed for %s: %s", database_id, exc)
            return []

    partitions = await asyncio.gather(
        *(_query_partition(notion, str(source["id"])) for source in data_sources)
    )
    pages: List[Dict[str, Any]] = []
    for partition in partitions:
        pages.extend(partition)
    logger.info(
        "Fetched %d pages from %d data sources", len(pages), len(data_sources)
    )
    return pages


def select_tracked_entities(pages: Sequence[Dict[str, Any]]) -> List[TrackedEntity]:
    """Keep pages with a group identifier, first occurrence per identifier."""
    seen: set[str] = set()
    tracked: List[TrackedEntity] = []
    for page in pages:
        record = parse_entity_record(page)
        if record is None:
            continue
        group_id = resolve_group_id(record.properties)
        if not group_id or group_id in seen:
            continue
        if not is_safe_group_id(group_id):
            logger.warning("Page %s: unusable group id %r, skipping", record.id, group_id)
            continue
        seen.add(group_id)
        tracked.append(TrackedEntity(record=record, group_id=group_id))
    return tracked


async def resolve_entities(
    notion: NotionClient, database_id: str
) -> List[TrackedEntity]:
    pages = await fetch_pages(notion, database_id)
    tracked = select_tracked_entities(pages)
    logger.info("Target projects: %d", len(tracked))
    return tracked

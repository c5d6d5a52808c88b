"""
Generation history with two-phase lazy loading.

Phase 1 pulls only the light metadata columns so the gallery can render at
once; phase 2 fills in the heavy `images` column a couple of rows at a
time. Entries created locally while an image is being generated carry a
temporary `gen-` id until they are persisted.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

TEMP_ID_PREFIX = "gen-"
DEFAULT_BATCH_SIZE = 2
DEFAULT_LIMIT = 50


def is_temporary_id(entry_id: str) -> bool:
    return entry_id.startswith(TEMP_ID_PREFIX)


def new_temporary_id(index: int = 0) -> str:
    return f"{TEMP_ID_PREFIX}{int(time.time() * 1000)}-{index}"


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return datetime.now(timezone.utc)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class GenerationEntry:
    id: str
    images: List[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_loading: bool = False
    prompt: Optional[str] = None
    ratio: Optional[str] = None
    resolution: Optional[str] = None

    @property
    def is_persisted(self) -> bool:
        return not is_temporary_id(self.id)


class GenerationHistory:
    """
    Local view of the generation history.

    `source` provides `fetch_metadata(limit)`, `fetch_images(ids)` and
    `delete(ids)` coroutines; see `menustudio.client.api.StudioClient`.
    """

    def __init__(self, source, batch_size: int = DEFAULT_BATCH_SIZE, limit: int = DEFAULT_LIMIT):
        self.source = source
        self.batch_size = batch_size
        self.limit = limit
        self.entries: List[GenerationEntry] = []
        self.loading = False

    def get(self, entry_id: str) -> Optional[GenerationEntry]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    @property
    def ids(self) -> List[str]:
        return [e.id for e in self.entries]

    async def fetch_generations(self) -> List[GenerationEntry]:
        """Phase 1: metadata for the newest rows, all marked loading. Local-only entries stay on top."""
        self.loading = True
        try:
            rows = await self.source.fetch_metadata(self.limit)
        finally:
            self.loading = False

        server_entries = [
            GenerationEntry(
                id=row["id"],
                images=[],
                timestamp=_parse_timestamp(row.get("created_at")),
                is_loading=True,
                prompt=row.get("prompt"),
                ratio=row.get("ratio"),
                resolution=row.get("resolution"),
            )
            for row in rows
        ]
        local_entries = [e for e in self.entries if not e.is_persisted]
        self.entries = local_entries + server_entries
        return self.entries

    async def load_images(self) -> None:
        """Phase 2: fetch images in sequential batches, updating entries in place"""
        pending = [e.id for e in self.entries if e.is_persisted and e.is_loading]
        for start in range(0, len(pending), self.batch_size):
            batch = pending[start:start + self.batch_size]
            try:
                rows = await self.source.fetch_images(batch)
            except Exception as e:
                # entries stay loading; the next load_images() retries them
                logger.error(f"Failed to load images for {batch}: {e}")
                continue
            images_by_id: Dict[str, List[str]] = {row["id"]: row.get("images") or [] for row in rows}
            for entry_id in batch:
                # entries deleted while the batch was in flight stay deleted
                entry = self.get(entry_id)
                if entry is None:
                    continue
                entry.images = images_by_id.get(entry_id, [])
                entry.is_loading = False

    async def load_images_for_entry(self, entry_id: str) -> None:
        entry = self.get(entry_id)
        if entry is None:
            return
        if not entry.is_persisted:
            entry.is_loading = False
            return
        rows = await self.source.fetch_images([entry_id])
        entry = self.get(entry_id)
        if entry is not None:
            entry.images = (rows[0].get("images") or []) if rows else []
            entry.is_loading = False

    async def refresh(self) -> List[GenerationEntry]:
        await self.fetch_generations()
        await self.load_images()
        return self.entries

    def add_loading_entry(
        self,
        entry_id: str,
        prompt: Optional[str] = None,
        ratio: Optional[str] = None,
        resolution: Optional[str] = None,
    ) -> GenerationEntry:
        entry = GenerationEntry(id=entry_id, is_loading=True, prompt=prompt, ratio=ratio, resolution=resolution)
        self.entries.insert(0, entry)
        return entry

    def add_loading_entries(
        self,
        count: int,
        prompt: Optional[str] = None,
        ratio: Optional[str] = None,
        resolution: Optional[str] = None,
    ) -> List[str]:
        new_entries = [
            GenerationEntry(id=new_temporary_id(i), is_loading=True, prompt=prompt, ratio=ratio, resolution=resolution)
            for i in range(count)
        ]
        self.entries = new_entries + self.entries
        return [e.id for e in new_entries]

    def update_entry_with_image(self, temp_id: str, image: str, metadata: Optional[Dict[str, str]] = None) -> None:
        entry = self.get(temp_id)
        if entry is None:
            return
        metadata = metadata or {}
        entry.images = [image]
        entry.is_loading = False
        entry.prompt = metadata.get("prompt") or entry.prompt
        entry.ratio = metadata.get("ratio") or entry.ratio
        entry.resolution = metadata.get("resolution") or entry.resolution

    def mark_persisted(self, temp_id: str, persisted_id: str) -> None:
        """Swap a temporary id for the id the backend assigned"""
        entry = self.get(temp_id)
        if entry is not None:
            entry.id = persisted_id

    def remove_loading_entry(self, entry_id: str) -> None:
        self.entries = [e for e in self.entries if e.id != entry_id]

    def remove_loading_entries(self, ids: List[str]) -> None:
        drop = set(ids)
        self.entries = [e for e in self.entries if e.id not in drop]

    async def delete_generation(self, entry_id: str) -> None:
        await self.delete_generations([entry_id])

    async def delete_generations(self, ids: List[str]) -> None:
        """Remove locally at once; only persisted ids reach the backend"""
        self.remove_loading_entries(ids)
        persisted = [i for i in ids if not is_temporary_id(i)]
        if not persisted:
            return
        try:
            await self.source.delete(persisted)
        except Exception as e:
            logger.error(f"Failed to delete generations {persisted}: {e}")
            raise

    async def clear_all_generations(self) -> None:
        persisted = [e.id for e in self.entries if e.is_persisted]
        self.entries = []
        if persisted:
            await self.source.delete(persisted)
        logger.info("All generations cleared")

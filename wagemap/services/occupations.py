"""
services/occupations.py
──────────────────────────────────────────────────────────────────────────────
Occupation directory lookups.

The wage table is fetched by *parent* key, not by the leaf code the user
picks: several leaf titles can share one parent table.  resolve() maps
whatever the user typed (a leaf code, a parent key or an exact title) to the
key to fetch.
"""
from __future__ import annotations

import logging
from typing import Optional

from wagemap.domain.models import OccupationEntry
from wagemap.ports.data_port import OccupationDirectoryPort

logger = logging.getLogger(__name__)


class OccupationDirectory:
    """In-memory occupation directory.

    Args:
        source: Any object satisfying OccupationDirectoryPort.
    """

    def __init__(self, source: OccupationDirectoryPort) -> None:
        self._entries = source.load_occupations()
        self._by_code = {e.code: e for e in self._entries}
        self._parents = {e.parent_key for e in self._entries}
        logger.debug(
            "OccupationDirectory loaded | entries=%d parents=%d",
            len(self._entries),
            len(self._parents),
        )

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, code: str) -> Optional[OccupationEntry]:
        return self._by_code.get(code.strip())

    def search(self, query: str, limit: Optional[int] = None) -> list[OccupationEntry]:
        """Entries whose "<code> <title>" contains the query, case-insensitively."""
        needle = query.strip().casefold()
        matches = [
            e for e in self._entries
            if needle in f"{e.code} {e.title}".casefold()
        ]
        return matches[:limit] if limit is not None else matches

    def resolve(self, query: str) -> Optional[str]:
        """Parent key for a leaf code, a parent key or an exact title.

        Returns:
            The parent key to fetch, or None when nothing matches.
        """
        text = query.strip()
        entry = self._by_code.get(text)
        if entry is not None:
            return entry.parent_key
        if text in self._parents:
            return text
        folded = text.casefold()
        for e in self._entries:
            if e.title.casefold() == folded:
                return e.parent_key
        return None

"""Append-only search history stored as tab separated lines."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from loguru import logger

DEFAULT_MAX_ENTRIES = 100


def get_state_dir() -> Path:
    """Get the sx state directory, honoring XDG_STATE_HOME."""
    state_home = os.environ.get("XDG_STATE_HOME")
    base = Path(state_home) if state_home else Path.home() / ".local" / "state"
    return base / "sx"


@dataclass(slots=True)
class HistoryEntry:
    """One recorded query."""

    timestamp: datetime
    query: str


class SearchHistory:
    """Persistence for past queries, trimmed to the newest ``max_entries``."""

    def __init__(
        self,
        path: Path | None = None,
        *,
        enabled: bool = True,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        self.path = path or get_state_dir() / "history"
        self.enabled = enabled
        self.max_entries = max_entries if max_entries > 0 else DEFAULT_MAX_ENTRIES

    def append(self, query: str) -> None:
        query = " ".join(query.split())
        if not self.enabled or not query:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().astimezone().isoformat(timespec="seconds")
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(f"{stamp}\t{query}\n")
        self._trim()

    def _read_lines(self) -> list[str]:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8")
        return [line.strip() for line in text.splitlines() if line.strip()]

    def _trim(self) -> None:
        lines = self._read_lines()
        if len(lines) <= self.max_entries:
            return
        kept = lines[-self.max_entries:]
        self.path.write_text("\n".join(kept) + "\n", encoding="utf-8")
        logger.debug("History trimmed to {} entries", len(kept))

    def load(self, limit: int | None = None) -> list[HistoryEntry]:
        """Load entries oldest first; ``limit`` keeps only the newest ones."""
        entries: list[HistoryEntry] = []
        for line in self._read_lines():
            stamp, sep, query = line.partition("\t")
            if not sep:
                continue
            try:
                timestamp = datetime.fromisoformat(stamp)
            except ValueError:
                continue
            entries.append(HistoryEntry(timestamp=timestamp, query=query))

        if limit is not None and 0 < limit < len(entries):
            entries = entries[-limit:]
        return entries

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

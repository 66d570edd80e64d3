"""Metrics stores: durable home of DailyRecords, one per calendar day.

Writes to the same day are serialised with one ``asyncio.Lock`` per day;
the last writer wins.  There are no cross-day transactions.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Protocol

from wellscore.analytics.summary import DailyRecord
from wellscore.errors import MetricsStoreError

logger = logging.getLogger(__name__)


class MetricsStore(Protocol):
    async def get(self, day: date) -> DailyRecord | None: ...

    async def get_range(self, start: date, end: date) -> list[DailyRecord]:
        """Records with ``start <= date <= end``, sorted by date."""
        ...

    async def put(self, record: DailyRecord) -> None: ...


class InMemoryMetricsStore:
    """Dict-backed store, for tests and one-off runs."""

    def __init__(self, records: list[DailyRecord] | None = None) -> None:
        self._records: dict[date, DailyRecord] = {r.date: r for r in records or []}
        self._locks: defaultdict[date, asyncio.Lock] = defaultdict(asyncio.Lock)

    def __len__(self) -> int:
        return len(self._records)

    async def get(self, day: date) -> DailyRecord | None:
        return self._records.get(day)

    async def get_range(self, start: date, end: date) -> list[DailyRecord]:
        return [self._records[d] for d in sorted(self._records) if start <= d <= end]

    async def put(self, record: DailyRecord) -> None:
        async with self._locks[record.date]:
            self._records[record.date] = record


class JsonDirectoryMetricsStore:
    """One ``YYYY-MM-DD.json`` file per day under *root*.

    Files are replaced atomically (temporary file + ``os.replace``), so a
    reader never sees a half-written record.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._locks: defaultdict[date, asyncio.Lock] = defaultdict(asyncio.Lock)

    def path_for(self, day: date) -> Path:
        return self.root / f"{day.isoformat()}.json"

    # -- blocking helpers, run in a worker thread ---------------------------

    def _read(self, path: Path) -> DailyRecord | None:
        if not path.exists():
            return None
        try:
            return DailyRecord.from_json(path.read_text())
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise MetricsStoreError(f"cannot read {path}: {exc}") from exc

    def _read_range(self, start: date, end: date) -> list[DailyRecord]:
        if not self.root.is_dir():
            return []
        records = []
        for path in sorted(self.root.glob("*.json")):
            try:
                day = date.fromisoformat(path.stem)
            except ValueError:
                logger.debug("Ignoring %s", path)
                continue
            if start <= day <= end:
                record = self._read(path)
                if record is not None:
                    records.append(record)
        return records

    def _write(self, record: DailyRecord) -> None:
        path = self.path_for(record.date)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.root, prefix=f".{path.stem}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(record.to_json())
                os.replace(tmp, path)
            except BaseException:
                os.unlink(tmp)
                raise
        except OSError as exc:
            raise MetricsStoreError(f"cannot write {path}: {exc}") from exc

    # -- MetricsStore -------------------------------------------------------

    async def get(self, day: date) -> DailyRecord | None:
        return await asyncio.to_thread(self._read, self.path_for(day))

    async def get_range(self, start: date, end: date) -> list[DailyRecord]:
        return await asyncio.to_thread(self._read_range, start, end)

    async def put(self, record: DailyRecord) -> None:
        async with self._locks[record.date]:
            await asyncio.to_thread(self._write, record)
        logger.debug("Stored %s", self.path_for(record.date))

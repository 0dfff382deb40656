from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Tuple

from .clients import AttendancePusher, DeviceClient, parse_timestamp
from .model import Punch, SyncReport

logger = logging.getLogger(__name__)


class WatermarkStore:
    """Last-synced punch time kept in a small JSON file.

    The device logs to the second, so the ids already handled at that exact
    second are stored too; a punch sharing the timestamp is still due.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> Optional[dict]:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable watermark file %s", self._path)
            return None
        return data if isinstance(data, dict) else None

    def load(self) -> Optional[datetime]:
        return self.load_state()[0]

    def load_state(self) -> Tuple[Optional[datetime], Optional[FrozenSet[str]]]:
        """`(time, ids)`; ids is None for files written before ids were kept."""
        data = self._read()
        if data is None:
            return None, frozenset()
        value = parse_timestamp(data.get("lastSyncTime"))
        if value is None:
            return None, frozenset()
        ids = data.get("syncedAtWatermark")
        if not isinstance(ids, list):
            return value, None
        return value, frozenset(str(i) for i in ids)

    def save(self, value: datetime, synced_ids: Iterable[str] = ()) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # write-then-rename so a crash never leaves half a file
        fd, tmp = tempfile.mkstemp(dir=str(self._path.parent), prefix=".watermark-")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"lastSyncTime": value.isoformat(), "syncedAtWatermark": sorted(synced_ids)}, f)
        os.replace(tmp, self._path)


class SyncSession:
    """One device, one server, one watermark.

    Punches newer than the watermark are pushed oldest first. A failed push
    ends the run and the watermark stays just before it, so the next run
    resumes there. Without a stored watermark, `initial_since` is the start.
    """

    def __init__(
        self,
        device: DeviceClient,
        pusher: AttendancePusher,
        watermarks: WatermarkStore,
        *,
        initial_since: Optional[datetime] = None,
    ):
        self._device = device
        self._pusher = pusher
        self._watermarks = watermarks
        stored, synced = watermarks.load_state()
        self.last_sync_time: Optional[datetime] = stored if stored is not None else initial_since
        # None: every punch at the watermark second was already handled
        self.synced_at_watermark: Optional[FrozenSet[str]] = synced if stored is not None else frozenset()

    def _is_due(self, punch: Punch) -> bool:
        if self.last_sync_time is None or punch.timestamp > self.last_sync_time:
            return True
        if punch.timestamp != self.last_sync_time or self.synced_at_watermark is None:
            return False
        return punch.biometric_id not in self.synced_at_watermark

    def sync_once(self) -> SyncReport:
        report = SyncReport(watermark=self.last_sync_time)
        try:
            self._device.connect()
        except Exception as exc:
            logger.error("Skipping sync, device not connected: %s", exc)
            report.connected = False
            report.errors.append(str(exc))
            return report

        try:
            punches = sorted(self._device.get_punches(), key=lambda p: p.timestamp)
        except Exception as exc:
            logger.error("Skipping sync, could not read attendance logs: %s", exc)
            report.connected = False
            report.errors.append(str(exc))
            return report
        finally:
            self._device.disconnect()

        fresh = [p for p in punches if self._is_due(p)]
        report.fetched = len(fresh)
        logger.info("Found %d new records (%d total in device)", len(fresh), len(punches))

        watermark = self.last_sync_time
        synced_ids = set(self.synced_at_watermark or ())
        advanced = False
        for punch in fresh:
            outcome = self._pusher.push(punch)
            if outcome.kind == "failed":
                # The server toggles in/out, so nothing after a failure may be sent.
                report.failed += 1
                report.errors.append(f"{punch.biometric_id}: {outcome.message}")
                logger.warning("Failed: %s - %s", punch.biometric_id, outcome.message)
                break
            if outcome.kind == "synced":
                report.synced += 1
                logger.info("Synced: %s - %s", punch.biometric_id, outcome.punch_type)
            else:
                report.skipped += 1
                logger.info("Skipped: %s - %s", punch.biometric_id, outcome.message)
            if punch.timestamp != watermark:
                watermark = punch.timestamp
                synced_ids = set()
            synced_ids.add(punch.biometric_id)
            advanced = True

        if advanced:
            self._watermarks.save(watermark, synced_ids)
            self.last_sync_time = watermark
            self.synced_at_watermark = frozenset(synced_ids)
        report.watermark = self.last_sync_time
        logger.info(
            "Sync summary: %d successful, %d skipped, %d failed",
            report.synced,
            report.skipped,
            report.failed,
        )
        return report

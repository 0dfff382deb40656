from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..core.constants import DEFAULT_DEVICE_PORT, DEFAULT_DEVICE_TIMEOUT_SECONDS, DEFAULT_POLL_SECONDS


@dataclass(frozen=True)
class SyncConfig:
    device_ip: str
    server_url: str
    device_id: str
    device_port: int = DEFAULT_DEVICE_PORT
    timeout_seconds: int = DEFAULT_DEVICE_TIMEOUT_SECONDS
    poll_seconds: int = DEFAULT_POLL_SECONDS
    watermark_path: str = ".device_sync_state.json"
    device_api_key: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "SyncConfig":
        return cls(
            device_ip=str(data.get("device_ip") or "192.168.1.201"),
            server_url=str(data.get("server_url") or "http://localhost:5000").rstrip("/"),
            device_id=str(data.get("device_id") or ""),
            device_port=int(data.get("device_port") or DEFAULT_DEVICE_PORT),
            timeout_seconds=int(data.get("timeout_seconds") or DEFAULT_DEVICE_TIMEOUT_SECONDS),
            poll_seconds=int(data.get("poll_seconds") or DEFAULT_POLL_SECONDS),
            watermark_path=str(data.get("watermark_path") or ".device_sync_state.json"),
            device_api_key=str(data.get("device_api_key") or ""),
        )


@dataclass(frozen=True)
class Punch:
    """One attendance log read from the terminal."""

    biometric_id: str
    timestamp: datetime


@dataclass(frozen=True)
class EnrolledUser:
    biometric_id: str
    name: str = ""
    card: str = ""


@dataclass(frozen=True)
class DeviceInfo:
    name: str = "Unknown"
    firmware: str = "Unknown"
    serial_number: str = "Unknown"
    platform: str = "Unknown"


@dataclass(frozen=True)
class PushOutcome:
    """Server answer for a single punch, already sorted into a bucket."""

    kind: str  # "synced" | "skipped" | "failed"
    message: str = ""
    punch_type: Optional[str] = None


@dataclass
class SyncReport:
    fetched: int = 0
    synced: int = 0
    skipped: int = 0
    failed: int = 0
    connected: bool = True
    watermark: Optional[datetime] = None
    errors: List[str] = field(default_factory=list)

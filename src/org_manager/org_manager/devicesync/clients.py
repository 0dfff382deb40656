"""Adapters for the two ends of a sync: the terminal and the API server."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Protocol, Sequence

import httpx
from zk import ZK

from .model import DeviceInfo, EnrolledUser, Punch, PushOutcome, SyncConfig

logger = logging.getLogger(__name__)

CHECKIN_PATH = "/api/attendance/device-checkin"


class DeviceClient(Protocol):
    def connect(self) -> None:
        raise NotImplementedError

    def disconnect(self) -> None:
        raise NotImplementedError

    def get_punches(self) -> Sequence[Punch]:
        raise NotImplementedError

    def get_users(self) -> Sequence[EnrolledUser]:
        raise NotImplementedError

    def get_info(self) -> DeviceInfo:
        raise NotImplementedError


class AttendancePusher(Protocol):
    def push(self, punch: Punch) -> PushOutcome:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class ZKDeviceClient(DeviceClient):
    """ZKTeco terminal over the pyzk protocol."""

    def __init__(self, config: SyncConfig):
        self._zk = ZK(config.device_ip, port=config.device_port, timeout=config.timeout_seconds)
        self._conn = None

    def connect(self) -> None:
        if self._conn is None:
            self._conn = self._zk.connect()

    def disconnect(self) -> None:
        if self._conn is not None:
            try:
                self._conn.disconnect()
            finally:
                self._conn = None

    def _require(self):
        if self._conn is None:
            raise RuntimeError("Device is not connected")
        return self._conn

    def get_punches(self) -> Sequence[Punch]:
        logs = self._require().get_attendance() or []
        return [Punch(biometric_id=str(log.user_id), timestamp=log.timestamp) for log in logs]

    def get_users(self) -> Sequence[EnrolledUser]:
        users = self._require().get_users() or []
        return [EnrolledUser(biometric_id=str(u.user_id), name=u.name or "", card=str(u.card or "")) for u in users]

    def get_info(self) -> DeviceInfo:
        conn = self._require()
        return DeviceInfo(
            name=conn.get_device_name() or "Unknown",
            firmware=conn.get_firmware_version() or "Unknown",
            serial_number=conn.get_serialnumber() or "Unknown",
            platform=conn.get_platform() or "Unknown",
        )


def classify_response(status_code: int, message: str, punch_type: Optional[str] = None) -> PushOutcome:
    """Sort a device-checkin response into synced / skipped / failed."""
    if 200 <= status_code < 300:
        return PushOutcome("synced", message, punch_type)
    if status_code == 400 and "Already checked" in message:
        return PushOutcome("skipped", "Already processed")
    if status_code == 404:
        return PushOutcome("skipped", "Employee not found in system")
    return PushOutcome("failed", message or f"HTTP {status_code}")


class HttpAttendancePusher(AttendancePusher):
    def __init__(self, config: SyncConfig, *, client: Optional[httpx.Client] = None):
        headers = {"X-Device-Key": config.device_api_key} if config.device_api_key else {}
        self._client = client or httpx.Client(base_url=config.server_url, timeout=config.timeout_seconds, headers=headers)
        self._device_id = config.device_id

    def push(self, punch: Punch) -> PushOutcome:
        payload = {
            "biometricId": punch.biometric_id,
            "timestamp": punch.timestamp.isoformat(),
            "deviceId": self._device_id,
        }
        try:
            response = self._client.post(CHECKIN_PATH, json=payload)
        except httpx.HTTPError as exc:
            return PushOutcome("failed", str(exc))

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return classify_response(response.status_code, str(body.get("message") or ""), body.get("punchType"))

    def close(self) -> None:
        self._client.close()


def parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None

"""ZKTeco device sync.

    org-device-sync start   poll the terminal and push new punches
    org-device-sync sync    one pass, then exit
    org-device-sync test    check the terminal answers
    org-device-sync info    device details and enrolled users
"""

from __future__ import annotations

import argparse
import importlib
import logging
import time
from datetime import datetime
from typing import Callable, Optional, Sequence

from dotenv import load_dotenv

from config import get_settings_module

from ..common.datetime_utils import parse_iso_datetime
from .clients import AttendancePusher, DeviceClient, HttpAttendancePusher, ZKDeviceClient
from .model import SyncConfig
from .session import SyncSession, WatermarkStore

logger = logging.getLogger("org_manager.devicesync")


def load_config(args: argparse.Namespace) -> SyncConfig:
    settings = importlib.import_module(get_settings_module())
    data = dict(getattr(settings, "DEVICE_SYNC", {}) or {})
    data.setdefault("device_api_key", getattr(settings, "DEVICE_API_KEY", ""))
    for key in ("device_ip", "device_port", "server_url", "device_id", "poll_seconds", "watermark_path"):
        value = getattr(args, key, None)
        if value is not None:
            data[key] = value
    return SyncConfig.from_dict(data)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="org-device-sync", description="Sync ZKTeco punches to the attendance API")
    parser.add_argument("--device-ip", dest="device_ip")
    parser.add_argument("--device-port", dest="device_port", type=int)
    parser.add_argument("--server-url", dest="server_url")
    parser.add_argument("--device-id", dest="device_id")
    parser.add_argument("--watermark", dest="watermark_path", help="file holding the last synced punch time")
    parser.add_argument("--log-level", default="INFO")

    sub = parser.add_subparsers(dest="command")
    start = sub.add_parser("start", help="poll forever")
    start.add_argument("--interval", dest="poll_seconds", type=int, help="seconds between polls")
    start.add_argument("--since", help="first-run start (ISO timestamp), default: today 00:00")
    sync = sub.add_parser("sync", help="one sync pass")
    sync.add_argument("--since", help="first-run start (ISO timestamp), default: today 00:00")
    sub.add_parser("test", help="test the device connection")
    sub.add_parser("info", help="device info and enrolled users")
    return parser


def _initial_since(args: argparse.Namespace, now: datetime) -> datetime:
    since = getattr(args, "since", None)
    if since:
        return parse_iso_datetime(since)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def cmd_test(device: DeviceClient, config: SyncConfig) -> int:
    logger.info("Testing connection to %s:%s", config.device_ip, config.device_port)
    try:
        device.connect()
        info = device.get_info()
    except Exception as exc:
        logger.error("Connection test failed: %s", exc)
        return 1
    finally:
        device.disconnect()
    logger.info("Connection test successful: model=%s firmware=%s serial=%s", info.name, info.firmware, info.serial_number)
    return 0


def cmd_info(device: DeviceClient, config: SyncConfig) -> int:
    try:
        device.connect()
        info = device.get_info()
        users = device.get_users()
    except Exception as exc:
        logger.error("Failed to get device info: %s", exc)
        return 1
    finally:
        device.disconnect()

    print(f"Device: {info.name} (platform {info.platform}, firmware {info.firmware}, serial {info.serial_number})")
    print(f"Total enrolled users: {len(users)}")
    for u in users:
        print(f"  - ID: {u.biometric_id}, Name: {u.name or 'N/A'}, Card: {u.card or 'N/A'}")
    return 0


def cmd_sync(session: SyncSession) -> int:
    report = session.sync_once()
    if not report.connected:
        return 1
    return 0 if report.failed == 0 else 2


def cmd_start(
    session: SyncSession,
    config: SyncConfig,
    *,
    sleep: Callable[[float], None] = time.sleep,
    max_cycles: Optional[int] = None,
) -> int:
    logger.info(
        "Starting device sync: device=%s:%s server=%s every %ss",
        config.device_ip,
        config.device_port,
        config.server_url,
        config.poll_seconds,
    )
    cycles = 0
    try:
        while max_cycles is None or cycles < max_cycles:
            try:
                session.sync_once()
            except Exception:
                logger.exception("Sync cycle failed, retrying in %ss", config.poll_seconds)
            cycles += 1
            if max_cycles is None or cycles < max_cycles:
                sleep(config.poll_seconds)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    return 0


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    device: Optional[DeviceClient] = None,
    pusher: Optional[AttendancePusher] = None,
) -> int:
    load_dotenv(override=False)
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if not args.command:
        parser.print_help()
        return 0

    config = load_config(args)
    device = device or ZKDeviceClient(config)

    if args.command == "test":
        return cmd_test(device, config)
    if args.command == "info":
        return cmd_info(device, config)

    pusher = pusher or HttpAttendancePusher(config)
    session = SyncSession(
        device,
        pusher,
        WatermarkStore(config.watermark_path),
        initial_since=_initial_since(args, datetime.now()),
    )
    try:
        if args.command == "sync":
            return cmd_sync(session)
        return cmd_start(session, config)
    finally:
        pusher.close()

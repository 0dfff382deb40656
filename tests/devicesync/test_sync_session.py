from __future__ import annotations

import json
from datetime import datetime

import httpx
import pytest

from src.org_manager.org_manager.devicesync.cli import cmd_start, cmd_sync, main
from src.org_manager.org_manager.devicesync.clients import (
    CHECKIN_PATH,
    HttpAttendancePusher,
    classify_response,
)
from src.org_manager.org_manager.devicesync.model import DeviceInfo, EnrolledUser, Punch, PushOutcome, SyncConfig
from src.org_manager.org_manager.devicesync.session import SyncSession, WatermarkStore


class FakeDevice:
    def __init__(self, punches=(), *, reachable=True):
        self.punches = list(punches)
        self.reachable = reachable
        self.connected = False

    def connect(self):
        if not self.reachable:
            raise ConnectionError("timed out")
        self.connected = True

    def disconnect(self):
        self.connected = False

    def get_punches(self):
        return list(self.punches)

    def get_users(self):
        return [EnrolledUser("101", "Alice", "555"), EnrolledUser("102")]

    def get_info(self):
        return DeviceInfo(name="K40", firmware="Ver 6.60", serial_number="ABC123", platform="ZLM60")


class FakePusher:
    def __init__(self, outcomes=None):
        self.outcomes = dict(outcomes or {})
        self.sent = []
        self.closed = False

    def push(self, punch):
        self.sent.append(punch)
        return self.outcomes.get(punch.biometric_id, PushOutcome("synced", "ok", "CHECK-IN"))

    def close(self):
        self.closed = True


def _at(hour, minute=0):
    return datetime(2026, 2, 2, hour, minute)


def _store(tmp_path):
    return WatermarkStore(tmp_path / "state" / "watermark.json")


def test_pushes_new_punches_oldest_first_and_saves_watermark(tmp_path):
    device = FakeDevice([Punch("102", _at(9, 5)), Punch("101", _at(8, 55))])
    pusher = FakePusher()
    store = _store(tmp_path)

    report = SyncSession(device, pusher, store).sync_once()

    assert [p.biometric_id for p in pusher.sent] == ["101", "102"]
    assert (report.fetched, report.synced, report.skipped, report.failed) == (2, 2, 0, 0)
    assert store.load() == _at(9, 5)
    assert json.loads(store.path.read_text()) == {
        "lastSyncTime": "2026-02-02T09:05:00",
        "syncedAtWatermark": ["102"],
    }
    assert not device.connected


def test_punches_at_or_before_watermark_are_not_resent(tmp_path):
    store = _store(tmp_path)
    store.save(_at(9, 0), ["101"])
    device = FakeDevice([Punch("101", _at(9, 0)), Punch("102", _at(9, 1))])
    pusher = FakePusher()

    report = SyncSession(device, pusher, store).sync_once()

    assert [p.biometric_id for p in pusher.sent] == ["102"]
    assert report.fetched == 1


def test_initial_since_applies_only_without_stored_watermark(tmp_path):
    device = FakeDevice([Punch("101", _at(7, 0)), Punch("102", _at(9, 0))])
    pusher = FakePusher()

    SyncSession(device, pusher, _store(tmp_path), initial_since=_at(8, 0)).sync_once()

    assert [p.biometric_id for p in pusher.sent] == ["102"]


def test_failure_stops_the_run_and_keeps_watermark_before_it(tmp_path):
    device = FakeDevice([Punch("101", _at(9, 0)), Punch("102", _at(9, 1)), Punch("103", _at(9, 2))])
    pusher = FakePusher({"102": PushOutcome("failed", "HTTP 500")})
    store = _store(tmp_path)
    session = SyncSession(device, pusher, store)

    report = session.sync_once()

    assert [p.biometric_id for p in pusher.sent] == ["101", "102"]
    assert (report.synced, report.failed) == (1, 1)
    assert report.errors == ["102: HTTP 500"]
    assert store.load() == _at(9, 0)

    pusher.outcomes.clear()
    session.sync_once()
    assert [p.biometric_id for p in pusher.sent[2:]] == ["102", "103"]
    assert store.load() == _at(9, 2)


def test_skipped_punches_advance_the_watermark(tmp_path):
    device = FakeDevice([Punch("999", _at(9, 0))])
    pusher = FakePusher({"999": PushOutcome("skipped", "Employee not found in system")})
    store = _store(tmp_path)

    report = SyncSession(device, pusher, store).sync_once()

    assert report.skipped == 1
    assert store.load() == _at(9, 0)


def test_punch_sharing_the_watermark_second_is_resent_after_a_failure(tmp_path):
    punches = [Punch("101", _at(9, 0)), Punch("102", _at(9, 0))]
    store = _store(tmp_path)
    first = FakePusher({"102": PushOutcome("failed", "HTTP 502")})

    SyncSession(FakeDevice(punches), first, store).sync_once()

    assert store.load_state() == (_at(9, 0), frozenset({"101"}))

    second = FakePusher()
    SyncSession(FakeDevice(punches), second, store).sync_once()

    assert [p.biometric_id for p in second.sent] == ["102"]
    assert store.load_state() == (_at(9, 0), frozenset({"101", "102"}))

    third = FakePusher()
    SyncSession(FakeDevice(punches), third, store).sync_once()
    assert third.sent == []


def test_older_watermark_file_treats_its_whole_second_as_sent(tmp_path):
    path = tmp_path / "watermark.json"
    path.write_text('{"lastSyncTime": "2026-02-02T09:00:00"}')
    store = WatermarkStore(path)
    pusher = FakePusher()

    assert store.load_state() == (_at(9, 0), None)

    SyncSession(FakeDevice([Punch("101", _at(9, 0)), Punch("102", _at(9, 1))]), pusher, store).sync_once()

    assert [p.biometric_id for p in pusher.sent] == ["102"]
    assert store.load_state() == (_at(9, 1), frozenset({"102"}))


class BrokenLogDevice(FakeDevice):
    def __init__(self, failures):
        super().__init__([Punch("101", _at(9, 0))])
        self.failures = failures

    def get_punches(self):
        if self.failures:
            self.failures -= 1
            raise OSError("socket reset")
        return super().get_punches()


def test_log_read_error_is_reported_and_device_released(tmp_path):
    device = BrokenLogDevice(failures=1)
    pusher = FakePusher()
    session = SyncSession(device, pusher, _store(tmp_path))

    report = session.sync_once()

    assert not report.connected
    assert report.errors == ["socket reset"]
    assert not device.connected
    assert pusher.sent == []
    assert cmd_sync(session) == 0
    assert [p.biometric_id for p in pusher.sent] == ["101"]


def test_unreachable_device_reports_not_connected(tmp_path):
    pusher = FakePusher()

    report = SyncSession(FakeDevice(reachable=False), pusher, _store(tmp_path)).sync_once()

    assert not report.connected
    assert report.errors == ["timed out"]
    assert pusher.sent == []


def test_corrupt_watermark_file_is_ignored(tmp_path):
    path = tmp_path / "watermark.json"
    path.write_text("{not json")

    assert WatermarkStore(path).load() is None


@pytest.mark.parametrize(
    "status, message, expected",
    [
        (200, "CHECK-IN recorded successfully", "synced"),
        (400, "Already checked in and checked out for today", "skipped"),
        (404, "Employee with biometric ID 9 not found", "skipped"),
        (400, "Biometric ID is required", "failed"),
        (500, "", "failed"),
    ],
)
def test_classify_response(status, message, expected):
    assert classify_response(status, message).kind == expected


def _pusher(handler, api_key=""):
    config = SyncConfig(device_ip="10.0.0.5", server_url="http://attendance.test", device_id="ZK-01", device_api_key=api_key)
    client = httpx.Client(base_url=config.server_url, transport=httpx.MockTransport(handler), headers={"X-Device-Key": api_key})
    return HttpAttendancePusher(config, client=client)


def test_http_pusher_posts_punch_payload():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        seen["key"] = request.headers.get("X-Device-Key")
        return httpx.Response(200, json={"success": True, "message": "CHECK-OUT recorded successfully", "punchType": "CHECK-OUT"})

    outcome = _pusher(handler, api_key="k1").push(Punch("101", _at(17, 0)))

    assert outcome == PushOutcome("synced", "CHECK-OUT recorded successfully", "CHECK-OUT")
    assert seen["path"] == CHECKIN_PATH
    assert seen["body"] == {"biometricId": "101", "timestamp": "2026-02-02T17:00:00", "deviceId": "ZK-01"}
    assert seen["key"] == "k1"


def test_http_pusher_maps_server_refusals():
    def handler(request):
        return httpx.Response(400, json={"success": False, "message": "Already checked in and checked out for today"})

    assert _pusher(handler).push(Punch("101", _at(18, 0))).kind == "skipped"


def test_http_pusher_network_error_is_a_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    outcome = _pusher(handler).push(Punch("101", _at(9, 0)))

    assert outcome.kind == "failed"
    assert "connection refused" in outcome.message


def test_cmd_sync_exit_codes(tmp_path):
    ok_session = SyncSession(FakeDevice([Punch("101", _at(9, 0))]), FakePusher(), _store(tmp_path))
    down_session = SyncSession(FakeDevice(reachable=False), FakePusher(), WatermarkStore(tmp_path / "b.json"))
    failing_session = SyncSession(
        FakeDevice([Punch("101", _at(9, 0))]),
        FakePusher({"101": PushOutcome("failed", "HTTP 500")}),
        WatermarkStore(tmp_path / "c.json"),
    )

    assert cmd_sync(ok_session) == 0
    assert cmd_sync(down_session) == 1
    assert cmd_sync(failing_session) == 2


def test_cmd_start_polls_until_cycles_are_used(tmp_path):
    device = FakeDevice([Punch("101", _at(9, 0))])
    pusher = FakePusher()
    session = SyncSession(device, pusher, _store(tmp_path))
    config = SyncConfig(device_ip="10.0.0.5", server_url="http://x", device_id="", poll_seconds=7)
    sleeps = []

    assert cmd_start(session, config, sleep=sleeps.append, max_cycles=3) == 0
    assert sleeps == [7, 7]
    assert len(pusher.sent) == 1


def test_cmd_start_keeps_polling_after_a_failed_cycle(tmp_path):
    device = BrokenLogDevice(failures=1)
    pusher = FakePusher()
    session = SyncSession(device, pusher, _store(tmp_path))
    config = SyncConfig(device_ip="10.0.0.5", server_url="http://x", device_id="", poll_seconds=7)

    assert cmd_start(session, config, sleep=lambda _: None, max_cycles=2) == 0
    assert [p.biometric_id for p in pusher.sent] == ["101"]


class ExplodingPusher(FakePusher):
    def push(self, punch):
        raise RuntimeError("pusher crashed")


def test_cmd_start_logs_unexpected_errors_and_continues(tmp_path, caplog):
    session = SyncSession(FakeDevice([Punch("101", _at(9, 0))]), ExplodingPusher(), _store(tmp_path))
    config = SyncConfig(device_ip="10.0.0.5", server_url="http://x", device_id="", poll_seconds=7)
    sleeps = []

    assert cmd_start(session, config, sleep=sleeps.append, max_cycles=2) == 0
    assert sleeps == [7]
    assert "Sync cycle failed" in caplog.text


def test_main_sync_with_injected_clients(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    watermark = tmp_path / "wm.json"
    pusher = FakePusher()
    device = FakeDevice([Punch("101", _at(9, 0))])

    code = main(
        ["--watermark", str(watermark), "sync", "--since", "2026-02-02T00:00:00"],
        device=device,
        pusher=pusher,
    )

    assert code == 0
    assert pusher.closed
    assert WatermarkStore(watermark).load() == _at(9, 0)


def test_main_info_prints_enrolled_users(capsys, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    assert main(["info"], device=FakeDevice()) == 0

    out = capsys.readouterr().out
    assert "Total enrolled users: 2" in out
    assert "ID: 101, Name: Alice, Card: 555" in out

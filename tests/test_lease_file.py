from netmod.core.events import LeaseEngineEvent
from netmod.core.exceptions import EngineStartError
from netmod.core.reactor import Reactor
from netmod.dhcp.lease_file import LeaseFileEngine, LeaseFileHandler, FileLease, LeaseFileError
from netmod.dhcp.options import DHCPClientOptions
from ipaddress import IPv4Address
from watchdog.events import FileCreatedEvent, FileModifiedEvent, FileDeletedEvent, FileMovedEvent
import random
import json
import time
import pytest

LEASE = {
    "address": "192.168.1.50",
    "netmask": "255.255.255.0",
    "router": "192.168.1.1",
    "dns_servers": ["192.168.1.1", "9.9.9.9"],
    "server_mac": "ab:0c:ef:01:02:03",
}


STARTED = []


@pytest.fixture(autouse=True)
def stop_engines():
    yield
    while STARTED:
        STARTED.pop().stop()


@pytest.fixture
def lease_path(tmp_path):
    return tmp_path / "eth0.lease.json"


def write_lease(path, **overrides):
    path.write_text(json.dumps({**LEASE, **overrides}))


def start_engine(lease_path, options=DHCPClientOptions(), **kwargs):
    reactor = Reactor()
    events  = []
    engine  = LeaseFileEngine("eth0", options, reactor, random.Random(7), events.append, lease_path=str(lease_path), **kwargs)
    STARTED.append(engine)
    reactor.process_pending()
    return engine, reactor, events


def poll(engine, reactor):
    engine.poll()
    reactor.process_pending()


def test_no_lease_yet(lease_path):
    engine, reactor, events = start_engine(lease_path)
    assert events == []
    assert not engine.bound


def test_lease_acquired(lease_path):
    write_lease(lease_path)
    engine, reactor, events = start_engine(lease_path)

    assert events == [LeaseEngineEvent.UP]
    assert engine.client_address() == IPv4Address("192.168.1.50")
    assert engine.client_mask() == IPv4Address("255.255.255.0")
    assert engine.router() == IPv4Address("192.168.1.1")
    assert engine.dns_servers(16) == [IPv4Address("192.168.1.1"), IPv4Address("9.9.9.9")]
    assert engine.dns_servers(1) == [IPv4Address("192.168.1.1")]
    assert engine.server_mac() == b"\xab\x0c\xef\x01\x02\x03"

    # Nothing changes while the same lease is held
    poll(engine, reactor)
    assert events == [LeaseEngineEvent.UP]


def test_lease_without_router(lease_path):
    write_lease(lease_path, router=None)
    engine, reactor, events = start_engine(lease_path)
    assert engine.router() is None


def test_lease_removed(lease_path):
    write_lease(lease_path)
    engine, reactor, events = start_engine(lease_path)

    lease_path.unlink()
    poll(engine, reactor)
    assert events == [LeaseEngineEvent.UP, LeaseEngineEvent.DOWN]

    # The last lease is still answered after it was lost
    assert engine.client_address() == IPv4Address("192.168.1.50")


def test_lease_expired(lease_path):
    write_lease(lease_path, expires=time.time() + 3600)
    engine, reactor, events = start_engine(lease_path)

    write_lease(lease_path, expires=time.time() - 1)
    poll(engine, reactor)
    assert events == [LeaseEngineEvent.UP, LeaseEngineEvent.DOWN]


def test_renewal_keeps_lease(lease_path):
    write_lease(lease_path, expires=time.time() + 60)
    engine, reactor, events = start_engine(lease_path)

    write_lease(lease_path, expires=time.time() + 3600)
    poll(engine, reactor)
    assert events == [LeaseEngineEvent.UP]


def test_new_address_goes_down_then_up(lease_path):
    write_lease(lease_path)
    engine, reactor, events = start_engine(lease_path)

    write_lease(lease_path, address="192.168.1.51")
    poll(engine, reactor)
    assert events == [LeaseEngineEvent.UP, LeaseEngineEvent.DOWN, LeaseEngineEvent.UP]
    assert engine.client_address() == IPv4Address("192.168.1.51")


@pytest.mark.parametrize("content", [b"{not json", b"[]", b'{"address": "\xff\xfe"}', json.dumps({"address": "192.168.1.50"}).encode(), json.dumps({**LEASE, "netmask": "garbage"}).encode()])
def test_unreadable_lease_is_fatal(lease_path, content):
    lease_path.write_bytes(content)
    engine, reactor, events = start_engine(lease_path)

    assert events == [LeaseEngineEvent.ERROR]
    assert engine.closed

    poll(engine, reactor)
    assert events == [LeaseEngineEvent.ERROR]


def test_non_contiguous_mask_is_not_a_file_error(lease_path):
    write_lease(lease_path, netmask="255.0.255.0")
    engine, reactor, events = start_engine(lease_path)
    assert events == [LeaseEngineEvent.UP]


def test_stop_ends_polling(lease_path):
    engine, reactor, events = start_engine(lease_path)
    engine.stop()

    write_lease(lease_path)
    poll(engine, reactor)
    assert events == []


def test_client_id_must_match(lease_path):
    options = DHCPClientOptions(auto_clientid=True)
    write_lease(lease_path, client_id="01ffffffffffff")
    engine, reactor, events = start_engine(lease_path, options, hwaddr_lookup=lambda ifname: "ab:0c:ef:01:02:03")
    assert engine.client_id == b"\x01\xab\x0c\xef\x01\x02\x03"
    assert events == []

    write_lease(lease_path, client_id="01ab0cef010203")
    poll(engine, reactor)
    assert events == [LeaseEngineEvent.UP]


@pytest.mark.parametrize("poll_interval", [0, -1, float("nan"), float("inf")])
def test_bad_poll_interval(lease_path, poll_interval):
    with pytest.raises(EngineStartError):
        start_engine(lease_path, poll_interval=poll_interval)


def test_start_failures(lease_path, tmp_path):
    def _no_device(ifname):
        raise OSError("No such device")

    with pytest.raises(EngineStartError):
        start_engine(lease_path, DHCPClientOptions(auto_clientid=True), hwaddr_lookup=_no_device)

    with pytest.raises(EngineStartError):
        start_engine(tmp_path / "missing" / "eth0.lease.json")


def test_expiry_check_is_rescheduled_with_jitter(lease_path):
    engine, reactor, events = start_engine(lease_path, poll_interval=10)
    assert len(reactor.timers) == 1

    delay = reactor.timers[0][0] - time.time()
    assert 8.9 < delay <= 11


def test_lease_expires_without_file_change(lease_path):
    write_lease(lease_path, expires=time.time() + 0.2)
    engine, reactor, events = start_engine(lease_path)
    assert events == [LeaseEngineEvent.UP]

    time.sleep(0.3)
    engine.check_expiry()
    reactor.process_pending()
    assert events == [LeaseEngineEvent.UP, LeaseEngineEvent.DOWN]
    assert not engine.bound


def test_handler_matches_lease_file_only(lease_path):
    changes = []
    handler = LeaseFileHandler(lease_path, lambda: changes.append(True))
    other   = str(lease_path.parent / "eth1.lease.json")

    handler.dispatch(FileCreatedEvent(str(lease_path)))
    handler.dispatch(FileModifiedEvent(str(lease_path)))
    handler.dispatch(FileDeletedEvent(str(lease_path)))
    handler.dispatch(FileMovedEvent(str(lease_path) + ".tmp", str(lease_path)))
    assert len(changes) == 4

    handler.dispatch(FileModifiedEvent(other))
    handler.dispatch(FileMovedEvent(other + ".tmp", other))
    assert len(changes) == 4


def test_file_change_is_picked_up(lease_path):
    engine, reactor, events = start_engine(lease_path, poll_interval=60)
    write_lease(lease_path)

    deadline = time.time() + 5
    while not events and time.time() < deadline:
        reactor.run_once(timeout=0.1)

    assert events == [LeaseEngineEvent.UP]


def test_file_lease_parse():
    lease = FileLease.parse(json.dumps({**LEASE, "expires": 5, "client_id": "01aa"}).encode())
    assert lease.expires == 5.0
    assert lease.client_id == b"\x01\xaa"
    assert lease.is_expired

    with pytest.raises(LeaseFileError):
        FileLease.parse(json.dumps({**LEASE, "dns_servers": "1.1.1.1"}).encode())

    with pytest.raises(LeaseFileError):
        FileLease.parse(b"\xff\xfe")

from netmod.core.events import ModuleEvent
from netmod.core.exceptions import EngineStartError
from netmod.core.runtime import Runtime
from netmod.dhcp.engine import LeaseEngine
from netmod.module import net_ipv4_dhcp
from netmod.module.registry import Registry
from ipaddress import IPv4Address
from functools import partial
import random
import pytest


class FakeLeaseEngine(LeaseEngine):
    def __init__(self, ifname, options, reactor, rng, callback):
        self.ifname      = ifname
        self.options     = options
        self.reactor     = reactor
        self.rng         = rng
        self.callback    = callback
        self.stop_count  = 0
        self.address     = IPv4Address("192.168.1.50")
        self.netmask     = IPv4Address("255.255.255.0")
        self.gateway     = IPv4Address("192.168.1.1")
        self.servers     = [IPv4Address("192.168.1.1"), IPv4Address("8.8.8.8")]
        self.mac         = bytes([0xAB, 0x0C, 0xEF, 0x01, 0x02, 0x03])
        self.queries     = 0

    def fire(self, event):
        self.callback(event)

    def stop(self):
        self.stop_count += 1

    def client_address(self):
        self.queries += 1
        return self.address

    def client_mask(self):
        return self.netmask

    def router(self):
        return self.gateway

    def dns_servers(self, max_servers):
        return self.servers[:max_servers]

    def server_mac(self):
        return self.mac


class EngineFactory(object):
    def __init__(self):
        self.engines = []
        self.fail    = False

    def __call__(self, *args):
        if self.fail:
            raise EngineStartError("interface does not exist")

        engine = FakeLeaseEngine(*args)
        self.engines.append(engine)
        return engine

    @property
    def engine(self):
        return self.engines[-1]


@pytest.fixture
def runtime():
    return Runtime(random_source=random.Random(1337))


@pytest.fixture
def signals(runtime):
    recorded = []
    for event in ModuleEvent:
        runtime.event_manager.subscribe(event, lambda instance, *args, event=event: recorded.append((event, instance, *args)))

    runtime.reactor.process_pending()
    return recorded


@pytest.fixture
def engine_factory():
    return EngineFactory()


@pytest.fixture
def registry(runtime, engine_factory):
    registry = Registry(runtime)
    registry.register(net_ipv4_dhcp.TYPE, partial(net_ipv4_dhcp.DHCPModule, engine_factory=engine_factory))
    return registry

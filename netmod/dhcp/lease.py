from netmod.dhcp.engine import LeaseEngine, MAX_DOMAIN_NAME_SERVERS
from dataclasses import dataclass
from ipaddress import IPv4Address
from typing import Optional, Tuple


@dataclass(frozen=True)
class LeaseSnapshot:
    address: IPv4Address
    netmask: IPv4Address
    router: Optional[IPv4Address]
    dns_servers: Tuple[IPv4Address, ...]
    server_mac: bytes


    def __repr__(self):
        return f"<LeaseSnapshot address={self.address}, netmask={self.netmask}, router={self.router}, dns_servers={[str(s) for s in self.dns_servers]}, server_mac={self.server_mac.hex(':')}>"


    @staticmethod
    def capture(engine: LeaseEngine, max_dns_servers: int=MAX_DOMAIN_NAME_SERVERS) -> 'LeaseSnapshot':
        '''Reads the engine's current lease. Nothing is cached between captures.'''
        router = engine.router()

        return LeaseSnapshot(
            address=IPv4Address(engine.client_address()),
            netmask=IPv4Address(engine.client_mask()),
            router=None if router is None else IPv4Address(router),
            dns_servers=tuple(IPv4Address(s) for s in engine.dns_servers(max_dns_servers)[:max_dns_servers]),
            server_mac=bytes(engine.server_mac())
        )

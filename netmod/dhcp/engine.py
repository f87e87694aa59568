from netmod.core.events import LeaseEngineEvent
from abc import ABC, abstractmethod
from ipaddress import IPv4Address
from typing import Callable, List, Optional

MAX_DOMAIN_NAME_SERVERS = 16


class LeaseEngine(ABC):
    '''
    Owns a DHCP session on one interface. Constructing an engine starts the
    session; `stop` ends it and no callback may fire afterwards.

    Engines are created as `engine_cls(ifname, options, reactor, random, callback)`
    and raise `EngineStartError` when the session cannot be started. The callback
    receives a single `LeaseEngineEvent`.

    The query methods report the most recently acquired lease.
    '''

    callback: Callable[[LeaseEngineEvent], None]

    @abstractmethod
    def stop(self) -> None:
        ...

    @abstractmethod
    def client_address(self) -> IPv4Address:
        ...

    @abstractmethod
    def client_mask(self) -> IPv4Address:
        ...

    @abstractmethod
    def router(self) -> Optional[IPv4Address]:
        ...

    @abstractmethod
    def dns_servers(self, max_servers: int) -> List[IPv4Address]:
        ...

    @abstractmethod
    def server_mac(self) -> bytes:
        ...

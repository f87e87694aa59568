from netmod.core.events import LeaseEngineEvent
from netmod.core.exceptions import EngineStartError
from netmod.core.reactor import Reactor
from netmod.core.runtime import api
from netmod.core.utilities import parse_mac
from netmod.core.worker import Worker
from netmod.dhcp.engine import LeaseEngine
from netmod.dhcp.options import DHCPClientOptions, interface_hwaddr
from ipaddress import IPv4Address
from pathlib import Path
from watchdog.events import FileSystemEventHandler, FileSystemEvent
from watchdog.observers import Observer
from typing import Callable, List, Optional
import random
import json
import math
import time
import os

DEFAULT_LEASE_DIR = "/run/netmod"


class LeaseFileError(ValueError):
    pass


class FileLease(object):
    '''A lease as written by an external DHCP client hook.'''

    def __init__(self, address: IPv4Address, netmask: IPv4Address, router: Optional[IPv4Address], dns_servers: list, server_mac: bytes, expires: float=None, client_id: bytes=None) -> None:
        self.address     = address
        self.netmask     = netmask
        self.router      = router
        self.dns_servers = dns_servers
        self.server_mac  = server_mac
        self.expires     = expires
        self.client_id   = client_id


    def __repr__(self):
        return f"<FileLease address={self.address}, netmask={self.netmask}, router={self.router}, dns_servers={self.dns_servers}, expires={self.expires}>"


    def __eq__(self, other):
        return (self.address, self.netmask, self.router, self.dns_servers, self.server_mac) == (other.address, other.netmask, other.router, other.dns_servers, other.server_mac)


    @property
    def is_expired(self):
        return self.expires is not None and self.expires < time.time()


    @staticmethod
    def parse(raw: bytes) -> 'FileLease':
        try:
            data = json.loads(raw)
            if type(data) is not dict:
                raise LeaseFileError("lease must be a JSON object")

            router    = data.get("router")
            client_id = data.get("client_id")
            expires   = data.get("expires")
            servers   = data.get("dns_servers", [])
            if type(servers) is not list:
                raise LeaseFileError("dns_servers must be a list")

            return FileLease(
                address=IPv4Address(data["address"]),
                netmask=IPv4Address(data["netmask"]),
                router=None if router is None else IPv4Address(router),
                dns_servers=[IPv4Address(s) for s in servers],
                server_mac=parse_mac(data["server_mac"]),
                expires=None if expires is None else float(expires),
                client_id=None if client_id is None else bytes.fromhex(client_id)
            )
        except LeaseFileError:
            raise
        except KeyError as e:
            raise LeaseFileError(f"missing field {e}") from e
        except (ValueError, TypeError, AttributeError) as e:
            raise LeaseFileError(str(e)) from e



class LeaseFileHandler(FileSystemEventHandler):
    '''Calls `on_change` whenever the watched lease file is created, rewritten, moved or removed.'''

    def __init__(self, lease_path: Path, on_change: Callable) -> None:
        self.lease_path = lease_path
        self.on_change  = on_change

    def _matches(self, path) -> bool:
        return Path(os.fsdecode(path)) == self.lease_path

    def on_created(self, event: FileSystemEvent) -> None:
        if self._matches(event.src_path):
            self.on_change()

    def on_modified(self, event: FileSystemEvent) -> None:
        if self._matches(event.src_path):
            self.on_change()

    def on_deleted(self, event: FileSystemEvent) -> None:
        if self._matches(event.src_path):
            self.on_change()

    def on_moved(self, event: FileSystemEvent) -> None:
        if self._matches(event.dest_path) or self._matches(event.src_path):
            self.on_change()



class LeaseFileEngine(Worker, LeaseEngine):
    '''
    Lease engine for hosts where an external DHCP client writes its current lease
    to a JSON file. The file is re-read whenever watchdog reports a change to it;
    a fresh lease reports UP, a removed or expired one reports DOWN and an
    unreadable one reports ERROR. Expiry of a lease nobody rewrites is checked
    every `poll_interval` seconds.
    '''

    def __init__(self, ifname: str, options: DHCPClientOptions, reactor: Reactor, rng: random.Random, callback: Callable[[LeaseEngineEvent], None], lease_path: str=None, poll_interval: float=1.0, hwaddr_lookup: Callable[[str], str]=interface_hwaddr) -> None:
        if not ifname:
            raise EngineStartError("interface name is empty")

        if not math.isfinite(poll_interval) or poll_interval <= 0:
            raise EngineStartError(f"poll interval must be a positive number, got {poll_interval}")

        self.ifname        = ifname
        self.options       = options
        self.rng           = rng
        self.callback      = callback
        self.lease_path    = Path(lease_path or f"{DEFAULT_LEASE_DIR}/{ifname}.lease.json").absolute()
        self.poll_interval = poll_interval
        self.client_id     = options.client_identifier(ifname, hwaddr_lookup)
        self.lease         = None
        self.bound         = False
        self.observer      = None
        super().__init__(reactor)

        # The handler runs on the observer's thread; `poll` hands the work to the reactor
        observer = Observer()
        try:
            observer.schedule(LeaseFileHandler(self.lease_path, self.poll), str(self.lease_path.parent), recursive=False)
            observer.start()
        except OSError as e:
            self.close()
            raise EngineStartError(f"Cannot watch {self.lease_path.parent}: {e}") from e

        self.observer = observer

        self.log.info(f"Watching {self.lease_path} for {ifname} (hostname={options.hostname}, vendorclassid={options.vendorclassid}, client_id={self.client_id.hex() if self.client_id else None})")
        self.poll()
        self.check_expiry()


    def __repr__(self):
        return f"<LeaseFileEngine ifname={self.ifname}, lease_path={self.lease_path}, bound={self.bound}, lease={self.lease}>"


    def close(self):
        super().close()

        observer, self.observer = self.observer, None
        if observer is not None:
            observer.stop()
            observer.join(timeout=1)


    def stop(self):
        self.log.info(f"Stopping lease watch for {self.ifname}")
        self.close()


    def _next_check(self):
        return self.poll_interval * self.rng.uniform(0.9, 1.1)


    def _read_lease(self) -> Optional[FileLease]:
        try:
            data = self.lease_path.read_bytes()
        except FileNotFoundError:
            return None

        lease = FileLease.parse(data)

        if lease.is_expired:
            self.log.debug(f"Ignoring expired lease {repr(lease)}")
            return None

        if self.client_id and lease.client_id != self.client_id:
            self.log.debug(f"Ignoring lease for another client {repr(lease)}")
            return None

        return lease


    def _lose_lease(self):
        self.log.info(f"Lease lost on {self.ifname}")
        self.bound = False
        self.callback(LeaseEngineEvent.DOWN)


    @api
    def poll(self):
        if self.closed:
            return

        try:
            lease = self._read_lease()
        except (OSError, LeaseFileError) as e:
            self.log.error(f"Cannot read lease for {self.ifname}: {e}")
            self.close()
            self.callback(LeaseEngineEvent.ERROR)
            return

        if self.bound and (lease is None or lease != self.lease):
            self._lose_lease()

        if lease is not None and not self.bound:
            self.log.info(f"Lease acquired on {self.ifname}: {repr(lease)}")
            self.lease = lease
            self.bound = True
            self.callback(LeaseEngineEvent.UP)

        elif lease is not None:
            # Renewal of the same lease
            self.lease = lease


    @api
    def check_expiry(self):
        if self.closed:
            return

        if self.bound and self.lease.is_expired:
            self._lose_lease()

        self.check_expiry(do_after=self._next_check())


    def client_address(self) -> IPv4Address:
        return self.lease.address



    def client_mask(self) -> IPv4Address:
        return self.lease.netmask


    def router(self) -> Optional[IPv4Address]:
        return self.lease.router


    def dns_servers(self, max_servers: int) -> List[IPv4Address]:
        return self.lease.dns_servers[:max_servers]


    def server_mac(self) -> bytes:
        return self.lease.server_mac

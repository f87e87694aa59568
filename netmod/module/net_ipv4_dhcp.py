"""
DHCP client module.

Synopsis:
    net.ipv4.dhcp(string ifname [, list opts])

Runs a DHCP client on a network interface. When an address is obtained the
instance goes up, but nothing is assigned to the interface. If the lease is
lost it goes down again. The interface must already be up.

Supported options (in the opts argument):
    "hostname", (string value): send this hostname to the DHCP server
    "vendorclassid", (string value): send this vendor class identifier
    "auto_clientid": send a client identifier generated from the MAC address

Variables are listed in `netmod.dhcp.facts`.
"""
from netmod.core.events import LeaseEngineEvent
from netmod.core.exceptions import ModuleArgumentError, EngineStartError, EngineFatalError, LeaseEngineStateError, ModuleStateError
from netmod.core.runtime import api
from netmod.core.worker import Worker
from netmod.dhcp.engine import LeaseEngine, MAX_DOMAIN_NAME_SERVERS
from netmod.dhcp.facts import derive
from netmod.dhcp.lease import LeaseSnapshot
from netmod.dhcp.options import parse_arguments
from netmod.module.instance import ModuleInstance
from typing import Callable

TYPE = "net.ipv4.dhcp"


class DHCPModule(Worker):
    def __init__(self, instance: ModuleInstance, args: list, engine_factory: Callable[..., LeaseEngine]) -> None:
        self.instance = instance
        self.engine   = None
        self.up       = False
        self.ifname   = None
        self.options  = None
        super().__init__(instance.runtime.reactor)

        try:
            self.ifname, self.options = parse_arguments(args)
        except ModuleArgumentError as e:
            self._fail(e)
            return

        try:
            self.engine = engine_factory(self.ifname, self.options, self.reactor, instance.runtime.random, self.dhcp_handler)
        except EngineStartError as e:
            self._fail(e)
            return

        self.instance.log.debug(f"DHCP client started on {self.ifname}")


    def __repr__(self):
        return f"<DHCPModule ifname={self.ifname}, up={self.up}, engine={self.engine!r}>"


    def _fail(self, error: Exception):
        self.instance.log.error(str(error))
        self.close()
        self.instance.backend_set_error(error)
        self.instance.backend_dead()


    def _free(self):
        # Release the engine before reporting death, and only once
        engine, self.engine = self.engine, None
        self.up = False
        self.close()

        if engine is not None:
            engine.stop()

        self.instance.backend_dead()


    @api
    def dhcp_handler(self, event: LeaseEngineEvent):
        if self.engine is None:
            self.instance.log.debug(f"Dropping {event} delivered after release")
            return

        if event is LeaseEngineEvent.UP:
            if self.up:
                raise LeaseEngineStateError(f"lease engine reported UP on {self.ifname} while already up")

            self.up = True
            self.instance.backend_up()

        elif event is LeaseEngineEvent.DOWN:
            if not self.up:
                raise LeaseEngineStateError(f"lease engine reported DOWN on {self.ifname} while not up")

            self.up = False
            self.instance.backend_down()

        elif event is LeaseEngineEvent.ERROR:
            error = EngineFatalError(f"DHCP client on {self.ifname} failed")
            self.instance.log.error(str(error))
            self.instance.backend_set_error(error)
            self._free()

        else:
            raise LeaseEngineStateError(f"unknown lease engine event {event!r}")


    def die(self):
        if self.instance.is_dead:
            return

        self._free()


    def get_var(self, name: str):
        if not self.up:
            raise ModuleStateError(f"variables of {self.ifname} are only available while up")

        lease = LeaseSnapshot.capture(self.engine, MAX_DOMAIN_NAME_SERVERS)
        try:
            return derive(name, lease)
        except ValueError as e:
            self.instance.log.error(str(e))
            raise

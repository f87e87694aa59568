from netmod.core.events import RuntimeEvent
from netmod.core.exceptions import UnknownModuleError
from netmod.core.runtime import Runtime, loop
from netmod.core.worker import Worker
from netmod.dhcp.lease_file import LeaseFileEngine, DEFAULT_LEASE_DIR
from netmod.module import net_ipv4_dhcp
from netmod.module.instance import ModuleInstance
from functools import partial

STATUS_INTERVAL = 5


class Registry(Worker):
    def __init__(self, runtime: Runtime):
        self.runtime   = runtime
        self.map       = {}
        self.instances = []
        super().__init__(runtime.reactor)


    def register(self, module_type: str, factory):
        '''`factory(instance, args)` builds the module backend for a new instance.'''
        self.map[module_type] = factory


    def new_instance(self, module_type: str, args: list, name: str=None) -> ModuleInstance:
        if module_type not in self.map:
            raise UnknownModuleError(module_type)

        instance        = ModuleInstance(self.runtime, module_type, name)
        instance.module = self.map[module_type](instance, args)

        if not instance.is_dead:
            self.instances.append(instance)

        return instance


    @loop(STATUS_INTERVAL)
    def get_status(self):
        self.instances = [i for i in self.instances if not i.is_dead]
        for instance in self.instances:
            self.runtime.event_manager.trigger_event(RuntimeEvent.STATUS, instance, repr(instance.module))



def default_registry(runtime: Runtime, lease_dir: str=DEFAULT_LEASE_DIR, poll_interval: float=1.0) -> Registry:
    '''Registry with `net.ipv4.dhcp` backed by lease files named `<lease_dir>/<ifname>.lease.json`.'''
    def _engine_factory(ifname, options, reactor, rng, callback):
        return LeaseFileEngine(ifname, options, reactor, rng, callback, lease_path=f"{lease_dir}/{ifname}.lease.json", poll_interval=poll_interval)

    registry = Registry(runtime)
    registry.register(net_ipv4_dhcp.TYPE, partial(net_ipv4_dhcp.DHCPModule, engine_factory=_engine_factory))
    return registry

from netmod.core.base_object import BaseObject
from netmod.core.events import ModuleEvent
from netmod.core.exceptions import ModuleStateError
from netmod.core.runtime import Runtime
from enum import Enum, auto
import logging


class ModuleState(Enum):
    DOWN = auto()
    UP   = auto()
    DEAD = auto()


class InstanceLogAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        return f"{self.extra['instance']}: {msg}", kwargs


class ModuleInstance(BaseObject):
    '''
    Host-side handle of one module instance. The module backend reports its
    lifecycle through the `backend_*` calls; each one updates `state` and is
    published on the runtime's event manager as a `ModuleEvent`.
    '''

    def __init__(self, runtime: Runtime, module_type: str, name: str=None) -> None:
        self.runtime     = runtime
        self.module_type = module_type
        self.name        = name or module_type
        self.state       = ModuleState.DOWN
        self.error       = None
        self.module      = None
        self._log        = InstanceLogAdapter(logging.getLogger(f"netmod.module.{module_type}"), {"instance": self.name})


    def __repr__(self):
        return f"<ModuleInstance name={self.name}, type={self.module_type}, state={self.state.name}, error={self.error!r}>"


    @property
    def log(self):
        return self._log


    @property
    def is_dead(self):
        return self.state is ModuleState.DEAD


    def _trigger(self, event: ModuleEvent, *args):
        self.runtime.event_manager.trigger_event(event, self, *args)


    def _check_alive(self, call: str):
        if self.is_dead:
            raise ModuleStateError(f"{call} on dead instance {self.name}")


    def backend_up(self):
        self._check_alive("backend_up")
        if self.state is ModuleState.UP:
            raise ModuleStateError(f"{self.name} is already up")

        self.state = ModuleState.UP
        self._trigger(ModuleEvent.UP)


    def backend_down(self):
        self._check_alive("backend_down")
        if self.state is ModuleState.DOWN:
            raise ModuleStateError(f"{self.name} is already down")

        self.state = ModuleState.DOWN
        self._trigger(ModuleEvent.DOWN)


    def backend_set_error(self, error: Exception):
        self._check_alive("backend_set_error")
        self.error = error
        self._trigger(ModuleEvent.ERROR, error)


    def backend_dead(self):
        self._check_alive("backend_dead")
        self.state = ModuleState.DEAD
        self._trigger(ModuleEvent.DEAD)


    def get_var(self, name: str):
        if self.state is not ModuleState.UP:
            raise ModuleStateError(f"variables of {self.name} are only available while up")

        return self.module.get_var(name)


    def die(self):
        '''Requests destruction of the instance.'''
        if self.is_dead:
            self.log.debug("Ignoring destruction request of dead instance")
            return

        self.module.die()

from netmod.core.base_object import BaseObject
from netmod.core.reactor import Reactor

class Worker(BaseObject):
    '''Base for objects whose `@api` and `@loop` methods run on a shared reactor.'''

    def __init__(self, reactor: Reactor) -> None:
        self.reactor = reactor
        self.closed  = False
        self.__init_loops()


    def close(self):
        self.closed = True


    def __init_loops(self):
        # Look the attributes up on the class so properties are never evaluated here
        for attr_name in dir(type(self)):
            attr = getattr(type(self), attr_name, None)
            if callable(attr) and hasattr(attr, '_loop_init'):
                attr._loop_init(self)

from enum import Enum, auto

class RuntimeEvent(Enum):
    STATUS = auto()

class LeaseEngineEvent(Enum):
    UP    = auto()
    DOWN  = auto()
    ERROR = auto()

class ModuleEvent(Enum):
    UP    = auto()
    DOWN  = auto()
    ERROR = auto()
    DEAD  = auto()

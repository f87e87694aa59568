class NetmodException(Exception):
    pass


class ModuleArgumentError(NetmodException):
    pass

class ArityError(ModuleArgumentError):
    pass

class ArgumentTypeError(ModuleArgumentError, TypeError):
    pass

class MissingValueError(ModuleArgumentError):
    pass

class UnknownOptionError(ModuleArgumentError):
    pass


class EngineStartError(NetmodException):
    pass

class EngineFatalError(NetmodException):
    pass

class LeaseEngineStateError(NetmodException):
    pass


class InvalidMaskError(NetmodException, ValueError):
    pass

class ModuleStateError(NetmodException):
    pass

class UnknownVariableError(NetmodException, KeyError):
    pass

class UnknownModuleError(NetmodException, KeyError):
    pass

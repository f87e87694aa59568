from netmod.core.exceptions import ArityError, ArgumentTypeError, MissingValueError, UnknownOptionError, EngineStartError
from netmod.core.utilities import parse_mac
from scapy.all import get_if_hwaddr
from scapy.error import Scapy_Exception
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

VALUE_OPTIONS = ("hostname", "vendorclassid")
FLAG_OPTIONS  = ("auto_clientid",)

# Hardware type prefix of an Ethernet client identifier (RFC 2132, option 61)
CLIENT_ID_HWTYPE_ETHERNET = b'\x01'


def is_string_no_nulls(value) -> bool:
    return type(value) is str and "\0" not in value


def interface_hwaddr(ifname: str) -> str:
    return get_if_hwaddr(ifname)


@dataclass(frozen=True)
class DHCPClientOptions:
    hostname: Optional[str] = None
    vendorclassid: Optional[str] = None
    auto_clientid: bool = False


    def client_identifier(self, ifname: str, hwaddr_lookup: Callable[[str], str]=interface_hwaddr) -> Optional[bytes]:
        """
        Builds the client identifier sent when `auto_clientid` is set.

        Parameters:
            ifname         (str): Interface whose hardware address identifies the client.
            hwaddr_lookup (func): Returns the MAC address of an interface.

        Returns:
            bytes: Hardware type followed by the MAC address, or None when `auto_clientid` is unset.
        """
        if not self.auto_clientid:
            return None

        try:
            mac = parse_mac(hwaddr_lookup(ifname))
        except (OSError, ValueError, Scapy_Exception) as e:
            raise EngineStartError(f"Cannot read hardware address of {ifname}: {e}") from e

        return CLIENT_ID_HWTYPE_ETHERNET + mac


def parse_options(opts: list) -> DHCPClientOptions:
    options = DHCPClientOptions()

    idx = 0
    while idx < len(opts):
        name = opts[idx]
        if not is_string_no_nulls(name):
            raise ArgumentTypeError(f"wrong option name type at position {idx}")

        if name in VALUE_OPTIONS:
            if idx + 1 == len(opts):
                raise MissingValueError(f"option value missing for {name}")

            value = opts[idx + 1]
            if not is_string_no_nulls(value):
                raise ArgumentTypeError(f"wrong option value type for {name}")

            options = replace(options, **{name: value})
            idx += 2

        elif name in FLAG_OPTIONS:
            options = replace(options, **{name: True})
            idx += 1

        else:
            raise UnknownOptionError(f"unknown option name {name!r}")

    return options


def parse_arguments(args: list) -> Tuple[str, DHCPClientOptions]:
    '''Validates `(ifname [, opts])` module arguments.'''
    if len(args) not in (1, 2):
        raise ArityError(f"wrong arity: expected 1 or 2 arguments, got {len(args)}")

    ifname = args[0]
    opts   = args[1] if len(args) == 2 else []

    if not is_string_no_nulls(ifname):
        raise ArgumentTypeError("wrong type: interface name must be a string without nul bytes")

    if type(opts) is not list:
        raise ArgumentTypeError("wrong type: options must be a list")

    return ifname, parse_options(opts)

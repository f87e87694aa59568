"""
Variables exposed by an up `net.ipv4.dhcp` instance, computed from a `LeaseSnapshot`.

    addr        - assigned IP address ("A.B.C.D")
    prefix      - address prefix length ("N")
    cidr_addr   - address and prefix in CIDR notation ("A.B.C.D/N")
    gateway     - router address ("A.B.C.D"), or "none" if not provided
    dns_servers - DNS server addresses (["A.B.C.D", ...])
    server_mac  - MAC address of the DHCP server ("AB:CD:EF:01:02:03")
"""
from netmod.core.exceptions import InvalidMaskError, UnknownVariableError
from netmod.dhcp.lease import LeaseSnapshot
from ipaddress import IPv4Address, IPv4Interface
from typing import List, Optional

ALL_ONES = 2**32 - 1


def format_addr(addr: IPv4Address) -> str:
    return str(IPv4Address(addr))


def mask_to_prefix(mask: IPv4Address) -> int:
    inverted = ~int(IPv4Address(mask)) & ALL_ONES

    # The host part must be a contiguous run of ones
    if inverted & (inverted + 1):
        raise InvalidMaskError(f"bad netmask {IPv4Address(mask)}")

    return 32 - inverted.bit_length()


def format_prefix(mask: IPv4Address) -> str:
    return str(mask_to_prefix(mask))


def format_cidr(addr: IPv4Address, mask: IPv4Address) -> str:
    return str(IPv4Interface((IPv4Address(addr), mask_to_prefix(mask))))


def format_gateway(router: Optional[IPv4Address]) -> str:
    if router is None:
        return "none"

    return format_addr(router)


def format_dns_servers(servers) -> List[str]:
    return [format_addr(server) for server in servers]


def format_mac(mac: bytes) -> str:
    if len(mac) != 6:
        raise ValueError(f"MAC address must be 6 bytes, got {len(mac)}")

    return ":".join(f"{b:02X}" for b in mac)


DERIVATIONS = {
    "addr":        lambda lease: format_addr(lease.address),
    "prefix":      lambda lease: format_prefix(lease.netmask),
    "cidr_addr":   lambda lease: format_cidr(lease.address, lease.netmask),
    "gateway":     lambda lease: format_gateway(lease.router),
    "dns_servers": lambda lease: format_dns_servers(lease.dns_servers),
    "server_mac":  lambda lease: format_mac(lease.server_mac),
}

VARIABLES = tuple(DERIVATIONS)


def derive(name: str, lease: LeaseSnapshot):
    try:
        derivation = DERIVATIONS[name]
    except KeyError:
        raise UnknownVariableError(name) from None

    return derivation(lease)

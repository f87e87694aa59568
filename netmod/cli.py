#!/usr/bin/env python3
from netmod.core.base_object import setup_logging
from netmod.core.events import ModuleEvent, RuntimeEvent
from netmod.core.runtime import Runtime
from netmod.dhcp.facts import VARIABLES
from netmod.dhcp.lease_file import DEFAULT_LEASE_DIR
from netmod.module import net_ipv4_dhcp
from netmod.module.instance import ModuleState
from netmod.module.registry import default_registry
import logging
import argparse


parser = argparse.ArgumentParser(prog='netmod-dhcp', description='Runs a DHCP lifecycle module on an interface and reports the lease it holds')
parser.add_argument('-i', '--interface', help="Interface to run the DHCP client on", required=True)
parser.add_argument('--hostname', help="Hostname to send to the DHCP server")
parser.add_argument('--vendorclassid', help="Vendor class identifier to send to the DHCP server")
parser.add_argument('--auto-clientid', action="store_true", help="Send a client identifier generated from the MAC address")
parser.add_argument('-l', '--lease-dir', default=DEFAULT_LEASE_DIR, help="Directory the DHCP client hook writes <interface>.lease.json to")
parser.add_argument('-p', '--poll-interval', default=1.0, type=float, help="Seconds between lease expiry checks")
parser.add_argument('-v', '--verbose', action="store_true", help="Print DEBUG messages to console")


def build_module_args(args: argparse.Namespace) -> list:
    opts = []
    if args.hostname is not None:
        opts += ["hostname", args.hostname]

    if args.vendorclassid is not None:
        opts += ["vendorclassid", args.vendorclassid]

    if args.auto_clientid:
        opts.append("auto_clientid")

    return [args.interface, opts]


def print_variables(instance):
    # The instance may have gone down again before the UP event was dispatched
    if instance.state is not ModuleState.UP:
        return

    for name in VARIABLES:
        try:
            print(f"{name}: {instance.get_var(name)}")
        except ValueError as e:
            print(f"{name}: <{e}>")


def main(argv: list=None) -> int:
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    runtime  = Runtime()
    registry = default_registry(runtime, lease_dir=args.lease_dir, poll_interval=args.poll_interval)
    events   = runtime.event_manager

    for event in ModuleEvent:
        events.log_filter.allowlist_events.add(event)

    if args.verbose:
        events.log_filter.allowlist_events.add(RuntimeEvent.STATUS)

    events.subscribe(ModuleEvent.UP, print_variables)
    events.subscribe(ModuleEvent.DEAD, lambda instance: runtime.reactor.stop())

    instance = registry.new_instance(net_ipv4_dhcp.TYPE, build_module_args(args), name=args.interface)

    try:
        runtime.reactor.run()
    except KeyboardInterrupt:
        instance.die()
        runtime.reactor.process_pending()

    return 1 if instance.error else 0


if __name__ == "__main__":
    raise SystemExit(main())

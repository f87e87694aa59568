from netmod.core.worker import Worker
from netmod.core.runtime import api
from enum import Enum
import logging


class EventLogFilter(logging.Filter):
    def __init__(self, name: str = "", allowlist_events: set=None) -> None:
        self.allowlist_events = allowlist_events or set()
        super().__init__(name)


    def filter(self, record: logging.LogRecord) -> bool | logging.LogRecord:
        if "event" in record.__dict__:
            if record.event in self.allowlist_events:
                return super().filter(record)
            else:
                return False
        else:
            return super().filter(record)


class EventManager(Worker):
    def __init__(self, reactor: 'Reactor'):
        self.subscriptions = {}
        self.log_filter    = EventLogFilter()
        super().__init__(reactor)

        self.log.addFilter(self.log_filter)


    def _check_init_event(self, event):
        if not event in self.subscriptions:
            self.subscriptions[event] = []


    @api
    def subscribe(self, event: Enum, callback, filter_func=None):
        self._check_init_event(event)

        self.log.debug(f"Appending callback for {event} for {callback}")
        self.subscriptions[event].append((filter_func, callback))


    @api
    def unsubscribe(self, event: Enum, callback):
        self._check_init_event(event)
        self.subscriptions[event] = [(f, s) for f, s in self.subscriptions[event] if s != callback]


    @api
    def trigger_event(self, event: Enum, *args, **kwargs):
        self._check_init_event(event)

        self.log.info(f"Event occurred: {event} {args}", extra={"event": event})
        for filter_func, subscriber in self.subscriptions[event]:
            if not filter_func or filter_func(*args, **kwargs):
                subscriber(*args, **kwargs)

from netmod.core.base_object import BaseObject
from netmod.core.utilities import binary_search_list
from threading import Thread, Event, get_ident
from queue import Queue, Empty
import time

class Reactor(BaseObject):
    '''Single-threaded event loop. Work is posted to a FIFO mailbox and timers
    are kept sorted by due time; everything runs on whichever thread drives the loop.
    '''

    def __init__(self) -> None:
        self.mailbox   = Queue()
        self.timers    = []
        self.event     = Event()
        self.thread    = None
        self.thread_id = None


    def __repr__(self):
        return f"<Reactor pending={self.mailbox.qsize()}, timers={len(self.timers)}, running={self.is_running}>"


    @property
    def is_running(self):
        return self.thread_id is not None


    def in_reactor_thread(self) -> bool:
        return self.thread_id == get_ident()


    def post(self, func: 'function', *args, **kwargs):
        self.mailbox.put((func, args, kwargs))


    def call_later(self, delay: float, func: 'function', *args, **kwargs):
        # Timers are only touched from the loop itself
        self.post(self._add_timer, time.time() + delay, func, args, kwargs)


    def _add_timer(self, due: float, func: 'function', args: tuple, kwargs: dict):
        idx = binary_search_list(self.timers, due, key=lambda item: item[0], fuzzy=True)
        self.timers.insert(idx, (due, func, args, kwargs))


    def _process_timers(self):
        idx = binary_search_list(self.timers, time.time(), key=lambda item: item[0], fuzzy=True)
        due = self.timers[:idx]
        del self.timers[:idx]

        for _, func, args, kwargs in due:
            func(*args, **kwargs)


    def run_once(self, timeout: float=150e-3) -> bool:
        '''Runs due timers and at most one mailbox item. Returns whether an item was run.'''
        self._process_timers()

        try:
            if timeout:
                func, args, kwargs = self.mailbox.get(timeout=timeout)
            else:
                func, args, kwargs = self.mailbox.get_nowait()
        except Empty:
            return False

        func(*args, **kwargs)
        return True


    def process_pending(self):
        '''Drains the mailbox (including work posted while draining) and due timers without blocking.'''
        thread_id = self.thread_id
        self.thread_id = get_ident()
        try:
            while self.run_once(timeout=0):
                pass
        finally:
            self.thread_id = thread_id


    def run(self):
        self.thread_id = get_ident()
        self.log.debug("Reactor running")
        try:
            while not self.event.is_set():
                self.run_once()
        finally:
            self.thread_id = None
            self.log.debug("Reactor stopped")


    def start(self):
        self.thread = Thread(target=self.run, daemon=True)
        self.thread.start()


    def stop(self):
        self.event.set()

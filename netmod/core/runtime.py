from netmod.core.reactor import Reactor
from queue import Queue, Empty
import random


class Runtime(object):
    '''Per-host execution context handed to module instances.'''

    def __init__(self, reactor: Reactor=None, random_source: random.Random=None) -> None:
        self.reactor = reactor or Reactor()
        self.random  = random_source or random.Random()

        from netmod.core.event_manager import EventManager
        self.event_manager = EventManager(self.reactor)



def loop(sleep_time):
    '''Method decorator that runs the method on the worker's reactor every `sleep_time` seconds until the worker is closed.'''
    def _outwrapper(func: 'function'):
        def _body(self, *args, **kwargs):
            if self.closed:
                return

            func(self, *args, **kwargs)
            self.reactor.call_later(sleep_time, _body, self, *args, **kwargs)

        api_func = api(_body)

        # Initialize the loop
        api_func._loop_init = api_func
        return api_func

    return _outwrapper



def api(func):
    '''Method decorator that sends execution contexts to the reactor of a Worker.'''
    def _wrapper(self, *args, sync_timeout: float=None, do_after: float=None, **kwargs):
        if sync_timeout:
            if self.reactor.in_reactor_thread():
                return func(self, *args, **kwargs)

            # We need a way to have the 'func' execute in the reactor's thread and return the result to the callers thread
            # We do this by having the reactor send it back via a temporary shared queue.
            queue = Queue()
            def _get_result():
                queue.put(func(self, *args, **kwargs))

            self.reactor.post(_get_result)

            try:
                # Return result when it's available or give up after sync_timeout
                return queue.get(timeout=sync_timeout)
            except Empty:
                raise TimeoutError

        elif do_after:
            self.reactor.call_later(do_after, func, self, *args, **kwargs)

        else:
            self.reactor.post(func, self, *args, **kwargs)

    _wrapper.__name__ = func.__name__
    _wrapper.__doc__  = func.__doc__
    return _wrapper

from functools import lru_cache
from rich.logging import RichHandler
import logging


def setup_logging(level: int=logging.INFO):
    logging.basicConfig(format='%(name)s(%(thread)d) %(message)s', handlers=[RichHandler()])
    logging.root.setLevel(level)


class BaseObject(object):

    @property
    @lru_cache(1)
    def log(self):
        return logging.getLogger(f'{self.__class__.__module__}.{self.__class__.__name__}')

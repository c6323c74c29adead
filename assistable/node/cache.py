import logging
import threading
import functools
LOGGER = logging.getLogger(__name__)

_CACHE = {}
_LOCK = threading.RLock()


def node_cache(func):
    """
    Memoize a zero-or-few argument factory for the lifetime of the process.
    Used for singletons such as Config.config() and the tool registry.
    Works on plain functions and on classmethods (when placed under @classmethod).
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        key = (func.__module__, func.__qualname__, args, tuple(sorted(kwargs.items())))
        with _LOCK:
            if key not in _CACHE:
                LOGGER.debug(f"Cache miss for {func.__qualname__}")
                _CACHE[key] = func(*args, **kwargs)
            return _CACHE[key]
    return wrapper


def node_cache_clear():
    with _LOCK:
        LOGGER.debug(f"Clearing {len(_CACHE)} cached entries")
        _CACHE.clear()

from __future__ import annotations
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Tuple
import logging
import threading
import time

from services.config.settings import GlobalConfiguration, parse_configuration

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class ConfigUnavailable(RuntimeError):
    """Global configuration could not be fetched (storage error or timeout)."""


class ConfigProvider(Protocol):
    def fetch_global_configuration(self) -> Optional[Mapping[str, Any]]:
        """Return the stored settings document, or None when none exists yet."""
        ...


def _call_with_timeout(fn: Callable[[], Any], timeout: float) -> Any:
    # Daemon thread: a fetch that outlives its caller finishes (or hangs) on its
    # own and never blocks interpreter exit.
    outcome: Dict[str, Any] = {}
    done = threading.Event()

    def target():
        try:
            outcome['value'] = fn()
        except Exception as e:
            outcome['error'] = e
        finally:
            done.set()

    threading.Thread(target=target, name="config-fetch", daemon=True).start()
    if not done.wait(timeout):
        raise ConfigUnavailable(f"configuration fetch timed out after {timeout}s")
    if 'error' in outcome:
        raise outcome['error']
    return outcome.get('value')


class ConfigCache:
    """Time-boxed cache of the global configuration.

    One instance per process, shared by every calculation. The entry is an
    immutable ``(fetched_at, configuration)`` tuple replaced in a single
    assignment, so readers never see a half-written entry. Two callers
    refreshing at the same time both fetch; the last one to finish wins.

    ``invalidate()`` bumps a generation counter. A fetch that started before
    the bump still returns its result to its caller but does not store it,
    so the next ``get()`` reads the document again.
    """

    def __init__(self, provider: ConfigProvider, ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self._provider = provider
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entry: Optional[Tuple[float, GlobalConfiguration]] = None
        self._generation = 0
        self._lock = threading.Lock()

    def get(self, timeout: float | None = None) -> GlobalConfiguration:
        entry = self._entry
        now = self._clock()
        if entry is not None and now - entry[0] < self._ttl:
            logger.debug("Using cached global configuration")
            return entry[1]

        generation = self._generation
        raw = self._fetch(timeout)
        config = parse_configuration(raw)
        if raw is None:
            logger.info("No global configuration stored yet; using fallback constants")
        with self._lock:
            if generation == self._generation:
                self._entry = (self._clock(), config)
            else:
                logger.debug("Configuration invalidated during fetch; result not cached")
        return config

    def invalidate(self) -> None:
        with self._lock:
            self._generation += 1
            self._entry = None
        logger.info("Global configuration cache invalidated")

    def _fetch(self, timeout: float | None) -> Optional[Mapping[str, Any]]:
        try:
            if timeout is None:
                return self._provider.fetch_global_configuration()
            return _call_with_timeout(self._provider.fetch_global_configuration, timeout)
        except ConfigUnavailable:
            raise
        except Exception as e:
            logger.exception("Error fetching global configuration")
            raise ConfigUnavailable("Failed to fetch global configuration") from e

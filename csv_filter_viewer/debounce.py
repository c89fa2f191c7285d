"""Deferred execution of a callback after input activity pauses.

:class:`Debouncer` collapses a burst of :meth:`Debouncer.trigger` calls
into a single invocation of its callback, ``delay`` seconds after the
last call.  It is built on :class:`threading.Timer`: each trigger cancels
the pending timer and starts a new one, so only the last scheduled run
executes.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 0.3


class Debouncer:
    """Cancellable, restartable delayed call.

    Parameters
    ----------
    callback : callable
        Invoked with the arguments of the most recent trigger.
    delay : float
        Seconds to wait after the last trigger before calling ``callback``.
    """

    def __init__(self, callback: Callable[..., Any], delay: float = DEFAULT_DELAY) -> None:
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self.callback = callback
        self.delay = delay
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._call: Tuple[Tuple[Any, ...], Dict[str, Any]] = ((), {})

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        """Schedule the callback, replacing any run that has not fired yet."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._call = (args, kwargs)
            self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        """Drop the pending run, if any."""
        with self._lock:
            self._stop()

    def flush(self) -> Any:
        """Run the pending call now instead of waiting.

        Returns the callback's result, or ``None`` if nothing was pending.
        """
        with self._lock:
            if self._timer is None:
                return None
            args, kwargs = self._call
            self._stop()
        return self.callback(*args, **kwargs)

    def _stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._generation += 1
        self._call = ((), {})

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A newer trigger, cancel or flush superseded this run
            if generation != self._generation:
                return
            args, kwargs = self._call
        try:
            self.callback(*args, **kwargs)
        except Exception:
            logger.exception("Debounced callback failed")
        finally:
            with self._lock:
                # Still pending while the callback runs
                if generation == self._generation:
                    self._timer = None
                    self._call = ((), {})

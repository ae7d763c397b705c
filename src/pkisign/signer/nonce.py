import threading
import time
from typing import Callable


class NonceGenerator:
    """Strictly increasing numeric nonces, safe across threads.

    Values are wall-clock milliseconds scaled by 1000 so several nonces can
    be issued within one millisecond; when the clock stalls or steps back the
    previous value plus one is used instead.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        return self.next()

    def next(self) -> str:
        candidate = int(self._clock() * 1000) * 1000
        with self._lock:
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
        return str(candidate)


default_nonces = NonceGenerator()

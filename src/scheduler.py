# =============================================================================
# MODULE: scheduler.py
# Connect Four - Cancellable timers driven by the client main loop
# =============================================================================

import heapq
import itertools
import logging
import threading
import time

logger = logging.getLogger('Scheduler')


class ScheduledTask:
    """Handle returned by Scheduler.call_later. Cancelling is idempotent."""

    def __init__(self, when, callback, name=''):
        self.when = when
        self.callback = callback
        self.name = name
        self.cancelled = False
        self.fired = False

    def cancel(self):
        if not self.cancelled and not self.fired:
            logger.debug(f"Cancelled task '{self.name}'")
        self.cancelled = True

    @property
    def pending(self):
        return not self.cancelled and not self.fired

    def __repr__(self):
        state = 'cancelled' if self.cancelled else ('fired' if self.fired else 'pending')
        return f"<ScheduledTask {self.name!r} at={self.when:.3f} {state}>"


class Scheduler:
    """
    Timer queue polled from the main loop. Callbacks only ever run inside
    run_pending(), so everything they touch stays on the main thread.
    call_later/call_soon may be used from any thread (network callbacks).
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._queue = []
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def now(self):
        return self._clock()

    def call_later(self, delay, callback, name=''):
        task = ScheduledTask(self._clock() + max(delay, 0), callback, name)
        with self._lock:
            heapq.heappush(self._queue, (task.when, next(self._counter), task))
        logger.debug(f"Scheduled task '{name}' in {delay:.2f}s")
        return task

    def call_soon(self, callback, name=''):
        return self.call_later(0, callback, name)

    def run_pending(self):
        """Runs every task due at the time of the call. Returns how many ran."""
        now = self._clock()
        with self._lock:
            # Tasks queued by callbacks during this pass wait for the next one.
            horizon = next(self._counter)

        ran = 0
        while True:
            with self._lock:
                if not self._queue:
                    break
                when, seq, task = self._queue[0]
                if when > now or seq > horizon:
                    break
                heapq.heappop(self._queue)
            if task.cancelled:
                continue
            task.fired = True
            task.callback()
            ran += 1
        return ran

    def cancel_all(self):
        with self._lock:
            tasks = [entry[2] for entry in self._queue]
            self._queue = []
        for task in tasks:
            task.cancel()

    def pending_tasks(self):
        with self._lock:
            return [entry[2] for entry in self._queue if entry[2].pending]

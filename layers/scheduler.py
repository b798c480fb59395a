import logging
import threading
from concurrent.futures import Executor, Future
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTimer:
    """
    Fires ``callback`` every ``interval`` seconds on a shared executor.

    The timer thread only submits work, so a slow tick never delays the next
    one. ``on_submit`` receives every future so the owner can cancel pending
    ticks on stop.
    """

    def __init__(self, name: str, interval: float, callback: Callable[[], None],
                 executor: Executor, run_immediately: bool = False,
                 on_submit: Optional[Callable[[Future], None]] = None):
        self.name = name
        self.interval = interval
        self.callback = callback
        self.executor = executor
        self.run_immediately = run_immediately
        self.on_submit = on_submit
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=f"{self.name}-timer", daemon=True)
        self._thread.start()
        logger.debug(f"Timer {self.name} started ({self.interval}s)")

    def stop(self, timeout: float = 2.0):
        self._stop_event.set()
        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"Timer {self.name} did not terminate gracefully")
        self._thread = None

    def _run(self):
        if self.run_immediately:
            self._fire()
        while not self._stop_event.wait(self.interval):
            self._fire()

    def _fire(self):
        if self._stop_event.is_set():
            return
        try:
            future = self.executor.submit(self._safe_callback)
        except RuntimeError as e:
            # Executor already shut down
            logger.debug(f"Timer {self.name} could not submit tick: {e}")
            return
        if self.on_submit:
            self.on_submit(future)

    def _safe_callback(self):
        try:
            self.callback()
        except Exception as e:
            logger.error(f"Error in {self.name} tick: {e}", exc_info=True)

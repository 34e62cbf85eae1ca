"""Marshals callbacks from worker threads onto the UI thread."""

import logging
import queue
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Dispatcher:
    """Queue of callables drained by the thread that owns UI state.

    Any thread may ``post``; only the UI loop calls ``drain``.
    """

    def __init__(self):
        self.task_queue: "queue.Queue[Callable[[], None]]" = queue.Queue()

    def post(self, task: Callable[[], None]) -> None:
        """Schedule task to run on the next drain."""
        self.task_queue.put(task)

    def drain(self, timeout: Optional[float] = None) -> int:
        """Run all pending tasks on the calling thread.

        Args:
            timeout: If given, block up to this many seconds for the first task

        Returns:
            Number of tasks run
        """
        ran = 0

        if timeout is not None:
            try:
                task = self.task_queue.get(timeout=timeout)
            except queue.Empty:
                return 0
            self._run(task)
            ran += 1

        while True:
            try:
                task = self.task_queue.get_nowait()
            except queue.Empty:
                break
            self._run(task)
            ran += 1

        if ran:
            logger.debug(f"Dispatcher ran {ran} tasks")
        return ran

    def _run(self, task: Callable[[], None]) -> None:
        try:
            task()
        except Exception as e:
            logger.error(f"Error in dispatched task: {e}", exc_info=True)
        finally:
            self.task_queue.task_done()

    def pending(self) -> int:
        return self.task_queue.qsize()

    def clear(self) -> int:
        """Drop pending tasks without running them."""
        dropped = 0
        while True:
            try:
                self.task_queue.get_nowait()
            except queue.Empty:
                break
            self.task_queue.task_done()
            dropped += 1
        if dropped:
            logger.debug(f"Dispatcher dropped {dropped} pending tasks")
        return dropped

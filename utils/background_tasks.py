"""
Background tasks for the HF Propagation Dashboard.

A single scheduler thread wakes every ``tick_seconds`` and starts each due
task on its own worker thread. A task is never started again while its
previous run is still going; its next run is scheduled when it starts.
"""

import time
import threading
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class ScheduledTask:
    name: str
    func: Callable[[], object]
    interval: float
    next_run: float
    last_run: Optional[float] = None
    in_progress: bool = False
    runs: int = 0
    errors: int = 0
    last_error: Optional[str] = None

    def is_due(self, now: float) -> bool:
        return not self.in_progress and now >= self.next_run


class TaskManager:
    """Runs named callables periodically until stopped."""

    def __init__(self, tick_seconds: float = 1.0, clock: Callable[[], float] = time.time):
        self.tasks: Dict[str, ScheduledTask] = {}
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self.tick_seconds = tick_seconds
        self.lock = threading.Lock()
        self._clock = clock
        self._stop_event = threading.Event()

    def add_task(self, name: str, task_func: Callable[[], object], interval_seconds: float = 300):
        """Schedule ``task_func`` every ``interval_seconds``; the first run is one interval away."""
        with self.lock:
            self.tasks[name] = ScheduledTask(
                name=name,
                func=task_func,
                interval=interval_seconds,
                next_run=self._clock() + interval_seconds,
            )
        logger.info(f"Added task: {name} (interval: {interval_seconds}s)")

    def remove_task(self, name: str) -> bool:
        """Unschedule a task. A run already in progress finishes normally."""
        with self.lock:
            removed = self.tasks.pop(name, None) is not None
        if removed:
            logger.info(f"Removed task: {name}")
        return removed

    def has_task(self, name: str) -> bool:
        with self.lock:
            return name in self.tasks

    def start_all(self):
        """Start the scheduler thread."""
        with self.lock:
            if self.running:
                logger.warning("Task manager already running")
                return
            self.running = True
            self._stop_event.clear()
            self.thread = threading.Thread(target=self._run_scheduler, name='task-scheduler', daemon=True)
            self.thread.start()
        logger.info("Task manager started")

    def stop_all(self, timeout: float = 5.0):
        """Stop the scheduler. Pending runs are cancelled; running ones are not interrupted."""
        with self.lock:
            self.running = False
            self._stop_event.set()
            thread, self.thread = self.thread, None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        logger.info("Task manager stopped")

    def run_pending(self) -> int:
        """Start every due task once; returns how many were started."""
        now = self._clock()
        with self.lock:
            due = [task for task in self.tasks.values() if task.is_due(now)]
            for task in due:
                task.in_progress = True
                task.next_run = now + task.interval

        for task in due:
            threading.Thread(target=self._run_task, args=(task,), name=f"task-{task.name}", daemon=True).start()
        return len(due)

    def _run_scheduler(self):
        while not self._stop_event.is_set():
            try:
                self.run_pending()
            except Exception as e:
                logger.error(f"Error in scheduler loop: {e}")
            self._stop_event.wait(self.tick_seconds)

    def _run_task(self, task: ScheduledTask):
        started = self._clock()
        try:
            task.func()
        except Exception as e:
            logger.error(f"Error running task {task.name}: {e}")
            with self.lock:
                task.errors += 1
                task.last_error = str(e)
        else:
            with self.lock:
                task.runs += 1
                task.last_error = None
            logger.info(f"Task {task.name} completed in {self._clock() - started:.2f}s")
        finally:
            with self.lock:
                task.last_run = self._clock()
                task.in_progress = False

    def get_status(self) -> dict:
        """Scheduler state and per-task counters."""
        with self.lock:
            return {
                'running': self.running,
                'tasks': {
                    name: {
                        'interval': task.interval,
                        'last_run': task.last_run,
                        'next_run': task.next_run,
                        'in_progress': task.in_progress,
                        'runs': task.runs,
                        'errors': task.errors,
                        'last_error': task.last_error,
                    }
                    for name, task in self.tasks.items()
                }
            }

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ScheduledTask:
    name: str
    interval_seconds: float
    func: Callable[[], object]
    initial_delay: float = 0.0
    runs: int = 0
    failures: int = 0
    _thread: Optional[threading.Thread] = field(default=None, repr=False)


class PeriodicScheduler:
    """Runs registered tasks on background threads with a fixed delay.

    Each task gets its own daemon thread: it waits ``initial_delay``, runs the
    task, then waits ``interval_seconds`` after each run finishes. A failing
    run is logged and the task stays scheduled.
    """

    def __init__(self, *, name: str = "jsonblob"):
        self._name = name
        self._tasks: Dict[str, ScheduledTask] = {}
        self._stop = threading.Event()
        self._started = False

    def add_task(
        self,
        name: str,
        interval_seconds: float,
        func: Callable[[], object],
        *,
        initial_delay: float = 0.0,
    ) -> ScheduledTask:
        if name in self._tasks:
            raise ValueError(f"task {name!r} already scheduled")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        task = ScheduledTask(
            name=name,
            interval_seconds=interval_seconds,
            func=func,
            initial_delay=max(0.0, initial_delay),
        )
        self._tasks[name] = task
        if self._started:
            self._spawn(task)
        return task

    @property
    def tasks(self) -> List[ScheduledTask]:
        return list(self._tasks.values())

    @property
    def running(self) -> bool:
        return self._started and not self._stop.is_set()

    def _run_once(self, task: ScheduledTask) -> None:
        try:
            task.func()
        except Exception:
            task.failures += 1
            logger.exception("scheduled task %s failed", task.name)
        finally:
            task.runs += 1

    def _loop(self, task: ScheduledTask) -> None:
        if self._stop.wait(task.initial_delay):
            return
        while True:
            self._run_once(task)
            if self._stop.wait(task.interval_seconds):
                return

    def _spawn(self, task: ScheduledTask) -> None:
        thread = threading.Thread(
            target=self._loop,
            args=(task,),
            name=f"{self._name}-{task.name}",
            daemon=True,
        )
        task._thread = thread
        thread.start()

    def start(self) -> None:
        if self._started:
            return
        self._stop.clear()
        self._started = True
        for task in self._tasks.values():
            self._spawn(task)
        logger.debug("scheduler started with %d tasks", len(self._tasks))

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        for task in self._tasks.values():
            if task._thread is not None:
                task._thread.join(timeout)
                task._thread = None
        self._started = False
        logger.debug("scheduler stopped")

    def tick(self) -> None:
        """Run every task once on the calling thread."""
        for task in list(self._tasks.values()):
            self._run_once(task)

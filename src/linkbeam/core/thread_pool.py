"""
=============================================================================
BOUNDED WORKER POOL
=============================================================================

A fixed set of worker threads pulling connection-handling tasks from a
shared queue.

=============================================================================
BACKPRESSURE
=============================================================================

The pool has exactly N slots (10 for the file server). A slot is taken
when a task is SUBMITTED and given back when the task FINISHES, so at
most N connections are ever queued or running at once:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept loop ──submit()──► [ slots: ■ ■ ■ ■ ■ ■ ■ ■ ■ □ ]           │
    │                                │                                     │
    │                                ▼                                     │
    │                            task queue ──► Worker-1 … Worker-10       │
    │                                                                      │
    │   All 10 slots taken?  submit() blocks, so the accept loop stops     │
    │   accepting. New clients wait in the kernel's listen backlog         │
    │   instead of in an ever-growing Python queue.                        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SHUTDOWN
=============================================================================

    shutdown(grace=5.0)
        │
        ├── 1. stop accepting: submit() now refuses work
        ├── 2. one poison pill (None) per worker, queued AFTER pending work
        ├── 3. join workers until the grace period runs out
        │
        └── still running?  FORCED CANCELLATION
                ├── drop queued tasks, calling their on_cancel()
                ├── call on_cancel() for every task still running
                └── join briefly; workers are daemons, so a stuck one
                    never keeps the interpreter alive

Python threads cannot be killed. Cancellation therefore goes through the
task's own `on_cancel` callback; for a connection that callback shuts the
socket down, which makes the blocked read/write in the handler fail and
the worker return.

=============================================================================
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional

from ..errors import PoolClosedError


logger = logging.getLogger(__name__)


DEFAULT_WORKERS = 10


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred function call.

    Attributes:
        func: The function to execute.
        args: Positional arguments for the function.
        kwargs: Keyword arguments for the function.
        on_cancel: Called (from the shutting-down thread) if the task is
            dropped from the queue or must be aborted while running.
        submitted_at: Time the task was submitted.
    """

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    on_cancel: Optional[Callable[[], Any]] = None
    submitted_at: float = field(default_factory=time.time)

    def cancel(self):
        if self.on_cancel is None:
            return
        try:
            self.on_cancel()
        except Exception:
            logger.exception("Task cancellation callback failed")


class Worker(threading.Thread):
    """
    Worker thread that processes tasks from the queue.

        1. task = queue.get()            ← blocks
        2. task is None?  → exit         ← poison pill
        3. task.func(*args, **kwargs)    ← errors logged, never fatal
        4. give the slot back
    """

    def __init__(self, pool: "ThreadPool", worker_id: int):
        super().__init__(name=f"{pool.name}-{worker_id}", daemon=True)

        self.pool = pool
        self.worker_id = worker_id
        self.state = WorkerState.IDLE
        self.current_task: Optional[Task] = None

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.name} started")

        while True:
            task = self.pool._task_queue.get()
            if task is None:
                self.pool._task_queue.task_done()
                break

            try:
                self._execute_task(task)
            finally:
                self.pool._slots.release()
                self.pool._task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.name} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        self.current_task = task
        start_time = time.time()

        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            logger.debug(f"Worker {self.name} completed task in {time.time() - start_time:.3f}s")
        except Exception as e:
            # One failing task must never take the worker down with it
            self.tasks_failed += 1
            logger.exception(
                f"Worker {self.name} task failed after {time.time() - start_time:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE
            self.current_task = None


class ThreadPool:
    """
    Fixed-size pool with blocking submission.

        pool = ThreadPool(workers=10)
        pool.start()
        pool.submit(handle_connection, args=(conn,), on_cancel=conn.abort)
        ...
        finished = pool.shutdown(grace=5.0)
    """

    def __init__(self, workers: int = DEFAULT_WORKERS, name: str = "linkbeam-worker"):
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")

        self.workers = workers
        self.name = name

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue()
        self._slots = threading.BoundedSemaphore(workers)
        self._workers: List[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = threading.Event()

    def start(self):
        with self._lock:
            if self._started:
                return
            if self._shutdown.is_set():
                raise PoolClosedError("Thread pool has been shut down")

            logger.info(f"Starting thread pool with {self.workers} workers")
            for worker_id in range(1, self.workers + 1):
                worker = Worker(self, worker_id)
                worker.start()
                self._workers.append(worker)
            self._started = True

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        on_cancel: Optional[Callable[[], Any]] = None,
    ) -> bool:
        """
        Queue a task, blocking while every slot is taken.

        Returns:
            True once the task is queued. False if the pool began shutting
            down while this call was waiting for a slot; the task was not
            queued and its on_cancel has been called.

        Raises:
            PoolClosedError: The pool is not started or already shut down.
        """
        if not self._started or self._shutdown.is_set():
            raise PoolClosedError("Thread pool is not accepting tasks")

        task = Task(func=func, args=args, kwargs=kwargs or {}, on_cancel=on_cancel)

        # ─────────────────────────────────────────────────────────────────
        # WAIT FOR A SLOT (backpressure), but keep an eye on shutdown
        # ─────────────────────────────────────────────────────────────────
        while not self._slots.acquire(timeout=0.1):
            if self._shutdown.is_set():
                task.cancel()
                return False

        if self._shutdown.is_set():
            self._slots.release()
            task.cancel()
            return False

        self._task_queue.put(task)
        return True

    def shutdown(self, grace: float = 5.0) -> bool:
        """
        Stop the pool, giving running and queued tasks `grace` seconds.

        Returns:
            True if every task finished inside the grace period, False if
            forced cancellation was needed.
        """
        with self._lock:
            if not self._started or self._shutdown.is_set():
                self._shutdown.set()
                return True
            self._shutdown.set()

        stats = self.stats
        logger.info(
            f"Shutting down thread pool (grace period {grace:.1f}s, "
            f"{stats['busy']} busy, {stats['queued']} queued)"
        )

        for _ in self._workers:
            self._task_queue.put(None)

        deadline = time.monotonic() + grace
        for worker in self._workers:
            worker.join(timeout=max(0.0, deadline - time.monotonic()))

        alive = [w for w in self._workers if w.is_alive()]
        if not alive:
            # A submit() racing with shutdown can land behind the pills
            for task in self._drain_queue():
                task.cancel()
                self._slots.release()
            stats = self.stats
            logger.info(
                f"Thread pool shutdown complete "
                f"({stats['completed']} completed, {stats['failed']} failed)"
            )
            return True

        # ─────────────────────────────────────────────────────────────────
        # FORCED CANCELLATION
        # ─────────────────────────────────────────────────────────────────
        logger.warning(
            f"{len(alive)} worker(s) still busy after {grace:.1f}s, cancelling remaining tasks"
        )

        dropped = self._drain_queue()
        for task in dropped:
            task.cancel()
            self._slots.release()
        for worker in alive:
            task = worker.current_task
            if task is not None:
                task.cancel()
        for worker in alive:
            self._task_queue.put(None)

        for worker in alive:
            worker.join(timeout=1.0)

        still_alive = sum(1 for w in self._workers if w.is_alive())
        if still_alive:
            logger.warning(f"{still_alive} worker(s) did not exit after cancellation")
        logger.info("Thread pool shutdown complete (forced)")
        return False

    def _drain_queue(self) -> List[Task]:
        dropped = []
        while True:
            try:
                item = self._task_queue.get_nowait()
            except queue.Empty:
                break
            self._task_queue.task_done()
            if item is not None:
                dropped.append(item)
        return dropped

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def is_accepting(self) -> bool:
        return self._started and not self._shutdown.is_set()

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def stats(self) -> dict:
        return {
            "workers": len(self._workers),
            "busy": self.busy_workers,
            "queued": self._task_queue.qsize(),
            "completed": sum(w.tasks_completed for w in self._workers),
            "failed": sum(w.tasks_failed for w in self._workers),
        }

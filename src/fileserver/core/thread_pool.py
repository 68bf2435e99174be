"""
=============================================================================
THREAD POOL
=============================================================================

A fixed set of worker threads pulling accepted connections from a bounded
queue. This is the server's only concurrency limit.

=============================================================================
WHY NOT A THREAD PER CONNECTION?
=============================================================================

    for connection in accept_connections():
        Thread(target=handle, args=(connection,)).start()

Every connection gets a thread, and nothing stops 10,000 connections from
becoming 10,000 threads (each with its own stack). A flood of connections
turns into memory exhaustion.

    pool = ThreadPool(num_workers=16, queue_size=64)
    pool.start()

    for connection in accept_connections():
        if not pool.submit(handle, args=(connection,)):
            connection.close()      # queue full: shed load

At most 16 connections are being served and at most 64 are waiting.
Everything beyond that is closed immediately by the acceptor.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌──────────────┐   submit()   ┌─────────────────────────┐
    │   Acceptor   │ ───────────► │  queue.Queue(maxsize=N) │
    └──────────────┘   (no block) └───────────┬─────────────┘
                                              │ get()
                       ┌──────────────────────┼──────────────────────┐
                       ▼                      ▼                      ▼
                 ┌──────────┐           ┌──────────┐           ┌──────────┐
                 │ Worker-0 │           │ Worker-1 │    ...    │ Worker-M │
                 └──────────┘           └──────────┘           └──────────┘

Shutdown uses the "poison pill" pattern: one None per worker goes into the
queue, and a worker that pulls None exits its loop.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """Worker thread states, for monitoring."""
    IDLE = "idle"        # Waiting for task
    BUSY = "busy"        # Executing task
    STOPPED = "stopped"  # Thread exited


@dataclass
class Task:
    """
    A deferred function call: "call func(*args, **kwargs) later".

    Attributes:
        func: The function to execute.
        args: Positional arguments for the function.
        kwargs: Keyword arguments for the function.
        submitted_at: Time the task was queued.
    """
    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """Worker thread that processes tasks from the shared queue."""

    def __init__(self, task_queue: queue.Queue, worker_id: int, idle_timeout: float = 1.0):
        """
        Args:
            task_queue: Queue to pull tasks from.
            worker_id: Identifier used in the thread name and logs.
            idle_timeout: Seconds between shutdown checks while idle.
        """
        # daemon=True: a stuck worker never keeps the process alive
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

        # Metrics
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        """Main worker loop: get, execute, repeat until a poison pill."""
        logger.debug(f"Worker {self.worker_id} started")

        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        """
        Execute a single task.

        Any exception, MemoryError included, fails only this task. The
        worker logs it and goes back to the queue.
        """
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s"
            )
        except Exception as e:
            self.tasks_failed += 1
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        """Signal the worker to stop."""
        self._shutdown.set()


class ThreadPool:
    """
    Fixed-size thread pool with a bounded task queue.

    Usage:
        pool = ThreadPool(num_workers=4, queue_size=16)
        pool.start()
        accepted = pool.submit(handle, args=(conn,))
        ...
        pool.shutdown(wait=True, timeout=10.0)
    """

    def __init__(self, num_workers: int = 16, queue_size: int = 64, idle_timeout: float = 1.0):
        """
        Args:
            num_workers: Worker threads started by start().
            queue_size: Maximum tasks waiting for a worker.
            idle_timeout: Seconds between shutdown checks while idle.
        """
        self.num_workers = num_workers
        self.queue_size = queue_size
        self.idle_timeout = idle_timeout

        # queue.Queue is thread-safe; put/get need no extra locking.
        # One extra slot per worker leaves room for the poison pills.
        self._task_queue: queue.Queue = queue.Queue(maxsize=queue_size + num_workers)
        self._pending_limit = queue_size

        self._workers: list = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutdown

    def start(self):
        """Start all worker threads. Idempotent."""
        with self._lock:
            if self._started:
                return

            logger.info(f"Starting thread pool with {self.num_workers} workers")

            for worker_id in range(self.num_workers):
                worker = Worker(self._task_queue, worker_id, self.idle_timeout)
                self._workers.append(worker)
                worker.start()

            self._started = True
            self._shutdown = False

    def submit(self, func: Callable[..., Any], args: tuple = (), kwargs: Optional[dict] = None) -> bool:
        """
        Queue a task without blocking.

        Returns:
            True if the task was queued, False if the queue is full.

        Raises:
            RuntimeError: If the pool is not started or is shutting down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        with self._lock:
            if self._task_queue.qsize() >= self._pending_limit:
                return False

            try:
                self._task_queue.put(Task(func=func, args=args, kwargs=kwargs or {}), block=False)
            except queue.Full:
                return False

        return True

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Shut the pool down.

        ┌─────────────────────────────────────────────────────────────────┐
        │   1. Reject new tasks                                            │
        │   2. If wait=True: let the queue drain (bounded by timeout)     │
        │   3. One poison pill per worker                                 │
        │   4. Join workers                                               │
        └─────────────────────────────────────────────────────────────────┘

        Args:
            wait: Let queued tasks finish before stopping workers.
            timeout: Upper bound on the drain wait, in seconds.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if wait:
            deadline = None if timeout is None else time.time() + timeout
            while self._task_queue.unfinished_tasks:
                if deadline is not None and time.time() > deadline:
                    logger.warning("Shutdown timeout, forcing stop")
                    break
                time.sleep(0.05)

        for _ in self._workers:
            try:
                self._task_queue.put(None, block=False)
            except queue.Full:
                pass

        for worker in self._workers:
            worker.shutdown()
            worker.join(timeout=2.0)

        self._workers.clear()
        self._started = False

        logger.info("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def pending(self) -> int:
        """Tasks waiting for a worker."""
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        """Worker and task counts, for logs and tests."""
        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
            },
            "tasks": {
                "queued": self.pending,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }

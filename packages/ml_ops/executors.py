# packages/ml_ops/executors.py

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Set

from packages.xai_lib.config import ExecutorConfig
from packages.xai_lib.logging import get_logger


class BoundedExecutor:
    """
    A thread pool with a hard cap on in-flight work (running + queued).

    When the cap is reached, submit() runs the task on the caller's own
    thread and hands back an already-finished future: nothing is dropped and
    nothing queues past capacity, but callers block under sustained overload.
    """

    def __init__(
        self,
        name: str,
        workers: int,
        queue_capacity: int,
        shutdown_grace_seconds: float,
        thread_name_prefix: str = "xai-async-",
        logger=None,
    ):
        self.name = name
        self.capacity = workers + queue_capacity
        self.shutdown_grace_seconds = shutdown_grace_seconds
        self.logger = logger or get_logger(f"{name}-pool")

        self._executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=f"{thread_name_prefix}{name}"
        )
        self._slots = threading.BoundedSemaphore(self.capacity)
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        if self._closed:
            raise RuntimeError(f"The {self.name} pool has been shut down")

        if not self._slots.acquire(blocking=False):
            self.logger.warning(
                f"{self.name} pool saturated ({self.capacity} in flight); running on caller thread"
            )
            return self._run_inline(fn, *args, **kwargs)

        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except RuntimeError:
            self._slots.release()
            raise

        with self._lock:
            self._pending.add(future)
        # Runs immediately if the task already finished
        future.add_done_callback(self._release)
        return future

    @property
    def in_flight(self) -> int:
        with self._lock:
            return len(self._pending)

    def shutdown(self) -> None:
        """
        Stops intake, waits up to the grace period for in-flight work, then
        cancels whatever is still queued. Running tasks cannot be preempted.
        """
        self._closed = True
        with self._lock:
            pending = list(self._pending)

        _, not_done = wait(pending, timeout=self.shutdown_grace_seconds)
        if not_done:
            cancelled = sum(1 for f in not_done if f.cancel())
            self.logger.warning(
                f"{self.name} pool grace period of {self.shutdown_grace_seconds}s expired: "
                f"cancelled {cancelled} queued task(s), {len(not_done) - cancelled} still running"
            )

        self._executor.shutdown(wait=False, cancel_futures=True)
        self.logger.debug(f"{self.name} pool closed")

    def _release(self, future: Future) -> None:
        # Free the slot before the future stops counting as in flight
        self._slots.release()
        with self._lock:
            self._pending.discard(future)

    @staticmethod
    def _run_inline(fn: Callable, *args, **kwargs) -> Future:
        future: Future = Future()
        future.set_running_or_notify_cancel()
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future


class WorkerPools:
    """
    Separate pools so a burst of predictions cannot starve training and
    vice versa.
    """

    def __init__(self, config: ExecutorConfig, logger=None):
        self.training = BoundedExecutor(
            "training",
            workers=config.training_workers,
            queue_capacity=config.training_queue_capacity,
            shutdown_grace_seconds=config.training_shutdown_grace_seconds,
            thread_name_prefix=config.thread_name_prefix,
            logger=logger,
        )
        self.prediction = BoundedExecutor(
            "prediction",
            workers=config.prediction_workers,
            queue_capacity=config.prediction_queue_capacity,
            shutdown_grace_seconds=config.prediction_shutdown_grace_seconds,
            thread_name_prefix=config.thread_name_prefix,
            logger=logger,
        )

    def shutdown(self) -> None:
        self.training.shutdown()
        self.prediction.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()

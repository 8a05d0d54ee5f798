"""Bounded worker pool fanning domains out to threads and results back in."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from queue import Empty, Full, Queue
from threading import Event
from typing import Callable, Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")

_POLL_INTERVAL = 0.1
_SENTINEL = object()
_DONE = object()


def _put(queue: Queue, item: object, stop: Event) -> bool:
    """Block until ``item`` is queued; give up once ``stop`` is set."""

    while not stop.is_set():
        try:
            queue.put(item, timeout=_POLL_INTERVAL)
            return True
        except Full:
            continue
    return False


def _get(queue: Queue, stop: Event) -> object:
    while True:
        try:
            return queue.get(timeout=_POLL_INTERVAL)
        except Empty:
            if stop.is_set():
                return _SENTINEL


class WorkerPool(Generic[T]):
    """Run ``handler`` over a stream of jobs with ``concurrency`` threads.

    Jobs pass through a one-slot queue so the producer never runs far ahead of
    the workers; results pass through a bounded queue so a slow consumer
    applies backpressure. Results arrive in completion order. A handler
    returning ``None`` contributes nothing.
    """

    def __init__(self, concurrency: int = 10, results_queue_size: int | None = None) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.concurrency = concurrency
        self.results_queue_size = results_queue_size or concurrency * 2

    def run(self, jobs: Iterable[str], handler: Callable[[str], T | None]) -> Iterator[T]:
        job_queue: Queue = Queue(maxsize=1)
        results: Queue = Queue(maxsize=self.results_queue_size)
        stop = Event()
        # producer + workers + closer
        executor = ThreadPoolExecutor(
            max_workers=self.concurrency + 2, thread_name_prefix="wayfuzz"
        )
        producer = executor.submit(self._produce, jobs, job_queue, stop)
        workers = [
            executor.submit(self._work, job_queue, results, handler, stop)
            for _ in range(self.concurrency)
        ]
        executor.submit(self._close_when_done, workers, results)

        finished = False
        try:
            while True:
                item = results.get()
                if item is _DONE:
                    break
                yield item  # type: ignore[misc]
            finished = True
        finally:
            if not finished:
                stop.set()
                while results.get() is not _DONE:
                    continue
            # An aborted producer may still be blocked reading its input.
            executor.shutdown(wait=finished)
        for future in (producer, *workers):
            error = future.exception()
            if error is not None:
                raise error

    def _produce(self, jobs: Iterable[str], job_queue: Queue, stop: Event) -> None:
        try:
            for job in jobs:
                if not _put(job_queue, job, stop):
                    return
        except BaseException:
            stop.set()
            raise
        finally:
            for _ in range(self.concurrency):
                if not _put(job_queue, _SENTINEL, stop):
                    break

    @staticmethod
    def _work(
        job_queue: Queue,
        results: Queue,
        handler: Callable[[str], T | None],
        stop: Event,
    ) -> None:
        try:
            while True:
                job = _get(job_queue, stop)
                if job is _SENTINEL:
                    return
                result = handler(job)  # type: ignore[arg-type]
                if result is not None and not _put(results, result, stop):
                    return
        except BaseException:
            stop.set()
            raise

    @staticmethod
    def _close_when_done(workers: list[Future], results: Queue) -> None:
        wait(workers)
        results.put(_DONE)


__all__ = ["WorkerPool"]

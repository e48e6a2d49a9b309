"""
Run reverse complement workers in chunks of at most `parallelism` sequences.

Workers in a chunk finish in any order. The scheduler waits for the whole chunk,
sorts the results by their original index and only then prints them, so output
always follows input order.

Workers are threads: sequences in a chunk run concurrently, not in parallel on separate cores.
"""

import multiprocessing as mp
import queue
import threading

from rcseq import utils
from rcseq.complement import (
    COMPLEMENT_TABLE,
    IndexedSequence,
    MissingInputError,
    complement_worker,
)

logger = utils.get_logger(__name__)


def default_parallelism() -> int:
    return max(1, mp.cpu_count())


def chunked(items: list, size: int):
    """Yield (start, chunk) pairs of consecutive items.

    >>> list(chunked(["a", "b", "c", "d", "e"], 2))
    [(0, ['a', 'b']), (2, ['c', 'd']), (4, ['e'])]
    """
    if size < 1:
        raise ValueError(f"chunk size must be at least 1, got {size}")
    for start in range(0, len(items), size):
        yield start, items[start : start + size]


class ChunkBarrier:
    """Counts outstanding workers of one chunk. wait() returns once every worker called done()."""

    def __init__(self):
        self._pending = 0
        self._cond = threading.Condition()

    @property
    def pending(self):
        with self._cond:
            return self._pending

    def add(self, n=1):
        with self._cond:
            self._pending += n

    def done(self):
        with self._cond:
            if self._pending <= 0:
                raise RuntimeError("ChunkBarrier.done() called more times than add()")
            self._pending -= 1
            if self._pending == 0:
                self._cond.notify_all()

    def wait(self):
        with self._cond:
            self._cond.wait_for(lambda: self._pending == 0)


class BatchScheduler:
    def __init__(self, parallelism=None, table=COMPLEMENT_TABLE, write=print):
        if parallelism is None:
            parallelism = default_parallelism()
        if parallelism < 1:
            raise ValueError(f"parallelism must be at least 1, got {parallelism}")
        self.parallelism = parallelism
        self.table = table
        self.write = write
        # one slot per worker of the largest chunk, so a worker never blocks on put
        self.results = queue.Queue(maxsize=parallelism)

    def run_chunk(self, start: int, chunk: list) -> list:
        """
        Complement one chunk concurrently and return its IndexedSequence results sorted by index.
        Raises the error of the lowest failing index after every worker in the chunk has finished.
        """
        barrier = ChunkBarrier()
        threads = []
        for offset, seq in enumerate(chunk):
            item = IndexedSequence(start + offset, seq)
            barrier.add()
            thread = threading.Thread(
                target=complement_worker,
                args=(item, self.results, barrier, self.table),
                name=f"revcomp-{item.index}",
                daemon=True,
            )
            threads.append(thread)
        logger.debug("dispatching %d sequences starting at index %d", len(threads), start)
        for thread in threads:
            thread.start()

        barrier.wait()

        collected = [self.results.get() for _ in range(len(chunk))]
        collected.sort(key=lambda x: x.index)

        failed = [x for x in collected if x.error is not None]
        if failed:
            raise failed[0].error
        return collected

    @utils.add_log
    def run(self, sequences: list) -> list:
        """Complement all sequences chunk by chunk and write one line per sequence in input order."""
        sequences = list(sequences)
        if not sequences:
            raise MissingInputError()

        out = []
        for start, chunk in chunked(sequences, self.parallelism):
            for item in self.run_chunk(start, chunk):
                self.write(item.sequence)
                out.append(item.sequence)
        logger.debug("processed %d sequences with parallelism %d", len(out), self.parallelism)
        return out

import threading
from typing import Generic, List, Optional, TypeVar

from pad_probe.events import AttackEvent, ByteRecovered, GuessChecked
from pad_probe.forge import build_forged_block
from pad_probe.state_snapshot import StateSnapshot

T = TypeVar("T")


class SingleSlotQueue(Generic[T]):
    """Thread-safe, size=1, latest-wins queue. The consumer only ever sees the newest item."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._slot: List[T] = []
        self._closed = False

    def publish(self, item: T) -> None:
        """Replace whatever is waiting with item. Ignored once closed."""
        with self._condition:
            if self._closed:
                return
            self._slot[:] = [item]
            self._condition.notify()

    def close(self) -> None:
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    def get(self, timeout: Optional[float] = None) -> Optional[T]:
        """Block until an item arrives. Returns None once closed and drained."""
        with self._condition:
            if not self._condition.wait_for(lambda: self._slot or self._closed, timeout):
                raise TimeoutError("queue get() timed out")
            if not self._slot:
                return None
            return self._slot.pop()


class SnapshotPublisher:
    """
    Engine observer that folds attack events into StateSnapshot values and
    publishes each one to a SingleSlotQueue for the UI.
    """

    def __init__(
        self,
        queue: SingleSlotQueue[StateSnapshot],
        block_size: int = 8,
        preceding_block: Optional[bytes] = None,
    ) -> None:
        self.queue = queue
        self.block_size = block_size
        self.preceding_block = preceding_block
        self.version = 0
        self.tries = 0
        self.position = 1
        self.guess = 0
        self.recovered = b""

    def __call__(self, event: AttackEvent) -> None:
        if isinstance(event, GuessChecked):
            self.tries += 1
            self.position = event.position
            self.guess = event.guess
        elif isinstance(event, ByteRecovered):
            self.recovered = bytes([event.recovered_byte]) + self.recovered
        self.queue.publish(self.snapshot())

    def snapshot(self, complete: bool = False) -> StateSnapshot:
        self.version += 1
        unsolved = (None,) * (self.block_size - len(self.recovered))
        intermediate = unsolved + tuple(self.recovered)

        plaintext = (None,) * self.block_size
        if self.preceding_block is not None:
            plaintext = tuple(
                None if i is None else i ^ c for i, c in zip(intermediate, self.preceding_block)
            )

        # Rebuild the block the oracle was last shown from the k-1 bytes solved before it.
        suffix = self.recovered[len(self.recovered) - (self.position - 1):]
        forged = build_forged_block(self.position, self.guess, suffix, self.block_size)

        return StateSnapshot(
            state_version=self.version,
            complete=complete,
            block_size=self.block_size,
            pad_length_k=self.position,
            byte_value_g=self.guess,
            tries=self.tries,
            ciphertext_prime=tuple(forged),
            intermediate=intermediate,
            plaintext=plaintext,
        )

    def finish(self) -> None:
        """Publish the final state and close the queue so the UI can exit."""
        self.queue.publish(self.snapshot(complete=True))
        self.queue.close()

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class StateSnapshot:
    """Minimal immutable snapshot of attack state."""

    state_version: int
    complete: bool
    block_size: int
    pad_length_k: int
    byte_value_g: int
    tries: int

    # Per-byte values; None marks bytes not solved yet.
    ciphertext_prime: Tuple[int, ...] = field(default_factory=tuple)
    intermediate: Tuple[Optional[int], ...] = field(default_factory=tuple)
    plaintext: Tuple[Optional[int], ...] = field(default_factory=tuple)

    @property
    def byte_index_i(self) -> int:
        return self.block_size - self.pad_length_k

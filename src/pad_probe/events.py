from dataclasses import dataclass
from typing import Callable, Union


@dataclass(frozen=True, slots=True)
class GuessChecked:
    """One oracle query and its verdict."""

    position: int
    guess: int
    verdict: bool


@dataclass(frozen=True, slots=True)
class ByteRecovered:
    """One intermediate byte resolved."""

    position: int
    recovered_byte: int


AttackEvent = Union[GuessChecked, ByteRecovered]
Observer = Callable[[AttackEvent], None]

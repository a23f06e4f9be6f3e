from pad_probe.codec import pad_block, xor


def build_forged_block(position: int, guess: int, recovered_suffix: bytes, block_size: int = 8) -> bytes:
    """
    Build the forged preceding block C'ₙ₋₁ sent to the oracle with the real target block.

    - position k: 1-based from the end of the block, also the padding value being forged
    - guess g: value placed at byte index i = block_size - k
    - recovered_suffix: the k-1 intermediate bytes Iₙ already solved, in block order

    Solved tail bytes become Iₙ[j] ⊕ k, so they decrypt to k. Unsolved bytes are zero.
    """
    if not 1 <= position <= block_size:
        raise ValueError(f"position must be in 1..{block_size}, got {position}")
    if not 0 <= guess <= 0xFF:
        raise ValueError(f"guess must be a byte value, got {guess}")
    if len(recovered_suffix) != position - 1:
        raise ValueError(
            f"position {position} needs {position - 1} recovered bytes, got {len(recovered_suffix)}"
        )

    forged = bytearray(block_size)
    byte_index_i = block_size - position
    forged[byte_index_i] = guess

    # Program the already-solved tail bytes to decrypt as k.
    tail_pad = pad_block(position, block_size)[byte_index_i + 1:]
    forged[byte_index_i + 1:] = xor(recovered_suffix, tail_pad)
    return bytes(forged)

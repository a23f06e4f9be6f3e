import string

from pad_probe.errors import InvalidBlockError, LengthMismatch, MalformedHex

HEX_PREFIXES = ("0x", "0X")
HEX_DIGITS = frozenset(string.hexdigits)


def _strip_prefix(text: str) -> str:
    if text.startswith(HEX_PREFIXES):
        return text[2:]
    return text


def hex_to_bytes(text: str) -> bytes:
    """Decode a hex string, with or without a 0x prefix."""
    digits = _strip_prefix(text)
    if len(digits) % 2 != 0:
        raise MalformedHex(f"Hex string must have even length, got {len(digits)}: {text!r}")
    bad = [c for c in digits if c not in HEX_DIGITS]
    if bad:
        raise MalformedHex(f"Invalid hex digit {bad[0]!r} in {text!r}")
    return bytes.fromhex(digits)


def bytes_to_hex(data: bytes) -> str:
    """Encode bytes as lowercase hex, prefixed with 0x."""
    return "0x" + bytes(data).hex()


def parse_block(text: str, block_size: int = 8) -> bytes:
    """Decode a hex block and check it is exactly block_size bytes."""
    block = hex_to_bytes(text)
    if len(block) != block_size:
        raise InvalidBlockError(block_size, len(block))
    return block


def xor(a: bytes, b: bytes) -> bytes:
    if len(a) != len(b):
        raise LengthMismatch(f"Both inputs need the same length ({len(a)} != {len(b)})")
    return bytes(x ^ y for x, y in zip(a, b))


def hex_to_ascii(text: str) -> str:
    """Map each decoded byte to the character with the same code point.

    No multi-byte decoding is attempted, so 0xe9 becomes "é" rather than an error.
    """
    return hex_to_bytes(text).decode("latin-1")


def pad_block(k: int, block_size: int) -> bytes:
    """ Set the last k bytes to k """
    block = bytearray(block_size)
    if k:
        block[-k:] = [k] * k
    return bytes(block)

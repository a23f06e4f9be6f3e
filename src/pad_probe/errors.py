class PadProbeError(Exception):
    """Base class for every error raised by pad_probe."""


class MalformedHex(PadProbeError, ValueError):
    pass


class LengthMismatch(PadProbeError, ValueError):
    pass


class InvalidBlockError(PadProbeError, ValueError):
    """A block was not exactly block_size bytes long."""

    def __init__(self, block_size: int, length: int):
        self.block_size = block_size
        self.length = length
        super().__init__(f"Block must be {block_size} bytes, got {length}")


class PluginLoadError(PadProbeError, RuntimeError):
    pass


class PluginSignatureError(PadProbeError, TypeError):
    pass


class DecryptionError(PadProbeError):
    """A block decryption run could not be completed."""


class OracleExhausted(DecryptionError):
    """No guess value produced valid padding at the given position."""

    def __init__(self, position: int):
        self.position = position
        super().__init__(
            f"No valid guess found at position {position}; oracle not behaving like pure PKCS#7?"
        )


class OracleError(DecryptionError):
    """The oracle raised or answered with something other than a bool."""

    def __init__(self, position: int, guess: int, reason: str):
        self.position = position
        self.guess = guess
        super().__init__(f"Oracle failed at position {position}, guess {guess:#04x}: {reason}")

"""Example oracle plugin for `pad-probe decrypt --oracle`.

The key is read from PAD_PROBE_DEMO_KEY (hex, 24 bytes for TripleDES). Encrypt a
message with the same key to get a block worth attacking.
"""
import os

from demo_oracle.cipher import CipherSuite, PaddingOracle
from pad_probe.codec import hex_to_bytes

DEFAULT_KEY_HEX = "0x000102030405060708090a0b0c0d0e0f1011121314151617"

_oracle = PaddingOracle(
    CipherSuite.DES3_CBC,
    key=hex_to_bytes(os.environ.get("PAD_PROBE_DEMO_KEY", DEFAULT_KEY_HEX)),
)


def check(forged_block: str, target_block: str) -> bool:
    return _oracle.check(forged_block, target_block)

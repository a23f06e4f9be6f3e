import os
from enum import Enum
from typing import Optional, Tuple

import structlog
from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from pad_probe.codec import parse_block


log = structlog.get_logger(__name__)


class CipherSuite(str, Enum):
    DES3_CBC = "DES3-CBC"
    AES_128_CBC = "AES-128-CBC"

    def __str__(self):
        return self.value

    @property
    def block_size(self) -> int:
        match self:
            case CipherSuite.DES3_CBC:
                return 8
            case CipherSuite.AES_128_CBC:
                return 16

    @property
    def key_size(self) -> int:
        match self:
            case CipherSuite.DES3_CBC:
                return 24
            case CipherSuite.AES_128_CBC:
                return 16


def new_key(suite: CipherSuite) -> bytes:
    return os.urandom(suite.key_size)


def new_iv(suite: CipherSuite) -> bytes:
    return os.urandom(suite.block_size)


def _cipher(suite: CipherSuite, key: bytes, iv: bytes) -> Cipher:
    match suite:
        case CipherSuite.DES3_CBC:
            return Cipher(TripleDES(key), modes.CBC(iv))
        case CipherSuite.AES_128_CBC:
            return Cipher(algorithms.AES(key), modes.CBC(iv))
        case _:
            raise ValueError(f"Invalid cipher suite: {suite}")


def encrypt(suite: CipherSuite, key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    """ PKCS#7-pad and CBC-encrypt the plaintext. The IV is not prepended. """
    padder = padding.PKCS7(suite.block_size * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = _cipher(suite, key, iv).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def decrypt(suite: CipherSuite, key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """ CBC-decrypt and unpad. Raises ValueError("Invalid padding bytes.") on bad padding. """
    decryptor = _cipher(suite, key, iv).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(suite.block_size * 8).unpadder()
    return unpadder.update(padded) + unpadder.finalize()


class PaddingOracle:
    """
    Local stand-in for a vulnerable service: it holds a secret key and answers only
    whether a two-block message (forged preceding block, target block) unpads cleanly.
    """

    def __init__(self, suite: CipherSuite = CipherSuite.DES3_CBC, key: Optional[bytes] = None):
        self.suite = suite
        self._key = key if key is not None else new_key(suite)
        self.queries = 0

    @property
    def block_size(self) -> int:
        return self.suite.block_size

    def encrypt(self, plaintext: bytes, iv: Optional[bytes] = None) -> Tuple[bytes, bytes]:
        """Encrypt under the secret key and return (iv, ciphertext)."""
        iv = iv if iv is not None else new_iv(self.suite)
        ciphertext = encrypt(self.suite, self._key, iv, plaintext)
        log.info("encrypted", cipher=str(self.suite), iv_hex=iv.hex(), ciphertext_hex=ciphertext.hex())
        return iv, ciphertext

    def check(self, forged_block: str, target_block: str) -> bool:
        prev_block = parse_block(forged_block, self.block_size)
        ciphertext_n = parse_block(target_block, self.block_size)
        self.queries += 1

        try:
            decrypt(self.suite, self._key, prev_block, ciphertext_n)
        except ValueError as e:
            log.debug("invalid padding bytes", ciphertext_n=ciphertext_n.hex(), ciphertext_n_1=prev_block.hex(), error=str(e))
            return False
        return True

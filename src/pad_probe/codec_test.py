import pytest

from pad_probe.codec import bytes_to_hex, hex_to_ascii, hex_to_bytes, pad_block, parse_block, xor
from pad_probe.errors import InvalidBlockError, LengthMismatch, MalformedHex


class TestHexToBytes:
    """Test suite for hex_to_bytes"""

    def test_with_prefix(self):
        """Test decoding with a lowercase 0x prefix"""
        assert hex_to_bytes("0xd2f8a91f2b61b980") == bytes([0xD2, 0xF8, 0xA9, 0x1F, 0x2B, 0x61, 0xB9, 0x80])

    def test_with_uppercase_prefix_and_digits(self):
        """Test decoding with 0X prefix and uppercase digits"""
        assert hex_to_bytes("0XABCD") == b"\xab\xcd"

    def test_without_prefix(self):
        """Test decoding without any prefix"""
        assert hex_to_bytes("0102") == b"\x01\x02"

    def test_empty(self):
        """Test that an empty string (or bare prefix) decodes to no bytes"""
        assert hex_to_bytes("") == b""
        assert hex_to_bytes("0x") == b""

    def test_odd_length(self):
        """Test that odd length input is rejected"""
        with pytest.raises(MalformedHex, match="even length"):
            hex_to_bytes("0xabc")

    @pytest.mark.parametrize("text", ["0xzz", "0x12 4", "g0", "0x0x12"])
    def test_invalid_digit(self, text):
        """Test that non-hex characters are rejected"""
        with pytest.raises(MalformedHex, match="Invalid hex digit"):
            hex_to_bytes(text)

    def test_malformed_hex_is_value_error(self):
        """Test MalformedHex can be caught as ValueError"""
        with pytest.raises(ValueError):
            hex_to_bytes("1")


class TestBytesToHex:
    """Test suite for bytes_to_hex"""

    def test_lowercase_prefixed(self):
        """Test output is lowercase with a 0x prefix"""
        assert bytes_to_hex(b"\xab\x01\x00") == "0xab0100"

    def test_empty(self):
        """Test empty input"""
        assert bytes_to_hex(b"") == "0x"

    def test_bytearray(self):
        """Test bytearray input"""
        assert bytes_to_hex(bytearray(b"\xff")) == "0xff"

    @pytest.mark.parametrize("data", [b"", b"\x00", bytes(range(256)), b"\xff" * 8])
    def test_round_trip(self, data):
        """Test hex_to_bytes(bytes_to_hex(b)) == b"""
        assert hex_to_bytes(bytes_to_hex(data)) == data


class TestParseBlock:
    """Test suite for parse_block"""

    def test_exact_length(self):
        """Test a 16 digit block parses to 8 bytes"""
        assert len(parse_block("0xf3e7a7327f1fc500")) == 8

    def test_wrong_length(self):
        """Test that short and long blocks are rejected"""
        with pytest.raises(InvalidBlockError) as exc_info:
            parse_block("0xf3e7a7327f1fc5")
        assert exc_info.value.block_size == 8
        assert exc_info.value.length == 7

        with pytest.raises(InvalidBlockError):
            parse_block("0xf3e7a7327f1fc50000")

    def test_custom_block_size(self):
        """Test a 16 byte block size"""
        assert parse_block("00" * 16, block_size=16) == bytes(16)

    def test_malformed(self):
        """Test malformed hex is reported before the length"""
        with pytest.raises(MalformedHex):
            parse_block("0xf3e7a7327f1fc5zz")


class TestXor:
    """Test suite for xor"""

    def test_basic(self):
        """Test byte-wise XOR"""
        assert xor(b"\x0f\xf0", b"\xff\xff") == b"\xf0\x0f"

    def test_self_is_zero(self):
        """Test xor(a, a) is all zero"""
        a = bytes.fromhex("d2f8a91f2b61b980")
        assert xor(a, a) == bytes(8)

    def test_involution(self):
        """Test xor(xor(a, b), b) == a"""
        a = bytes.fromhex("bba2eb7e301cc603")
        b = bytes.fromhex("f3e7a7327f1fc500")
        assert xor(xor(a, b), b) == a

    def test_length_mismatch(self):
        """Test unequal lengths are rejected"""
        with pytest.raises(LengthMismatch, match="same length"):
            xor(b"\x00", b"\x00\x00")


class TestHexToAscii:
    """Test suite for hex_to_ascii"""

    def test_ascii(self):
        """Test plain ASCII text"""
        assert hex_to_ascii("0x48454c4c4f") == "HELLO"

    def test_raw_byte_mapping(self):
        """Test bytes above 0x7f map to the same code point without UTF-8 decoding"""
        assert hex_to_ascii("0xc3a9") == "Ã©"

    def test_control_bytes_kept(self):
        """Test padding bytes survive as control characters"""
        assert hex_to_ascii("4103") == "A\x03"


class TestPadBlock:
    """Test suite for pad_block"""

    def test_pad_block(self):
        """Test the last k bytes are set to k"""
        assert pad_block(3, 8) == b"\x00\x00\x00\x00\x00\x03\x03\x03"

    def test_full_block(self):
        """Test k == block_size"""
        assert pad_block(8, 8) == b"\x08" * 8

    def test_zero(self):
        """Test k == 0 yields an all zero block"""
        assert pad_block(0, 8) == bytes(8)

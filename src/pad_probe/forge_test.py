import pytest

from pad_probe.forge import build_forged_block


class TestBuildForgedBlock:
    """Test suite for build_forged_block"""

    def test_first_position(self):
        """Test position 1 puts the guess in the last byte and zeroes the rest"""
        assert build_forged_block(1, 0x02, b"") == bytes.fromhex("0000000000000002")

    def test_recovered_bytes_xored_with_position(self):
        """Test solved tail bytes are XORed with the new padding value"""
        # Iₙ tail = c6 03, forging padding 3 at position 3 with guess 0x1f.
        forged = build_forged_block(3, 0x1F, bytes.fromhex("c603"))
        assert forged == bytes.fromhex("00000000001fc500")

    def test_last_position(self):
        """Test position 8 fills the whole block"""
        suffix = bytes.fromhex("a2eb7e301cc603")
        forged = build_forged_block(8, 0xB3, suffix)
        assert forged == bytes.fromhex("b3aae3763814ce0b")

    def test_tail_decrypts_to_padding(self):
        """Test forged tail ⊕ recovered suffix is all equal to the position"""
        suffix = bytes.fromhex("301cc603")
        forged = build_forged_block(5, 0x00, suffix)
        assert bytes(f ^ r for f, r in zip(forged[-4:], suffix)) == b"\x05" * 4

    @pytest.mark.parametrize("position", range(1, 9))
    def test_shape(self, position):
        """Test the forged block is always 8 bytes"""
        forged = build_forged_block(position, 0xFF, b"\xaa" * (position - 1))
        assert len(forged) == 8
        assert forged[8 - position] == 0xFF
        assert forged[:8 - position] == bytes(8 - position)

    def test_block_size_16(self):
        """Test a 16 byte block size"""
        forged = build_forged_block(2, 0x10, b"\x01", block_size=16)
        assert forged == bytes(14) + b"\x10\x03"

    @pytest.mark.parametrize("position", [0, 9, -1])
    def test_position_out_of_range(self, position):
        """Test positions outside 1..block_size are rejected"""
        with pytest.raises(ValueError, match="position"):
            build_forged_block(position, 0, b"")

    @pytest.mark.parametrize("guess", [-1, 256])
    def test_guess_out_of_range(self, guess):
        """Test guesses outside 0..255 are rejected"""
        with pytest.raises(ValueError, match="guess"):
            build_forged_block(1, guess, b"")

    def test_suffix_length_mismatch(self):
        """Test the suffix must hold exactly position - 1 bytes"""
        with pytest.raises(ValueError, match="recovered bytes"):
            build_forged_block(3, 0, b"\x01")

"""Tests for memory and register operations."""

from chip8cpu import execute
from conftest import set_registers


class TestBasicMemory:
    """Test basic register operations."""

    def test_set_basic(self, fresh_state):
        """6XNN - Set VX = NN."""
        state = execute(fresh_state, 0x600A)
        assert state.V[0] == 0xA

    def test_add_basic(self, fresh_state):
        """7XNN - Add NN to VX."""
        state = set_registers(fresh_state, V1=0x10)
        state = execute(state, 0x7105)
        assert state.V[1] == 0x15

    def test_add_wraps_without_flag(self, fresh_state):
        """7XNN - Overflow wraps and VF is untouched."""
        state = set_registers(fresh_state, V1=0xFF, VF=0x42)
        state = execute(state, 0x7102)
        assert state.V[1] == 0x01
        assert state.V[15] == 0x42


class TestIndexRegister:
    """Test I register operations."""

    def test_set_index_basic(self, fresh_state):
        """ANNN - Set I register to NNN."""
        state = execute(fresh_state, 0xA123)
        assert state.I == 0x123

    def test_set_index_maximum(self, fresh_state):
        """ANNN - Set I register to maximum 12-bit value."""
        state = execute(fresh_state, 0xAFFF)
        assert state.I == 0xFFF

    def test_set_index_multiple_operations(self, fresh_state):
        """ANNN - Test multiple consecutive I register sets."""
        state = fresh_state

        state = execute(state, 0xA111)
        assert state.I == 0x111

        state = execute(state, 0xA222)
        assert state.I == 0x222

        state = execute(state, 0xA000)
        assert state.I == 0x000


class TestRandom:
    """Test random number generation."""

    def test_random_zero_mask(self, fresh_state):
        """CXNN - Random AND with 0x00 should always be 0."""
        state = execute(fresh_state, 0xC000)
        assert state.V[0] == 0

    def test_random_bit_mask(self, fresh_state):
        """CXNN - Result never has bits outside the mask."""
        state = fresh_state
        for _ in range(20):
            state = execute(state, 0xC20F)
            assert int(state.V[2]) & 0xF0 == 0

    def test_random_advances_key(self, fresh_state):
        """CXNN - Each draw consumes the PRNG key."""
        state = execute(fresh_state, 0xC0FF)
        assert not (state.rng == fresh_state.rng).all()

    def test_random_is_reproducible(self, fresh_state):
        """CXNN - The same key yields the same byte."""
        first = execute(fresh_state, 0xC1FF)
        second = execute(fresh_state, 0xC1FF)
        assert first.V[1] == second.V[1]

    def test_random_preserves_state(self, fresh_state):
        """CXNN - Verify other state is preserved."""
        state = execute(fresh_state, 0x6142)
        state = execute(state, 0xA300)

        state = execute(state, 0xC0FF)

        assert state.V[1] == 0x42
        assert state.I == 0x300

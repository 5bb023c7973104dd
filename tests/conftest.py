"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chip8cpu import CPU, create_state
from chip8cpu.logging import ConsoleLogger


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def advance(self, seconds: float):
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def carry_state():
    """Provide a fresh state with the shift carry quirk enabled."""
    return create_state().replace(shift_sets_carry=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cpu(clock):
    """Provide an engine driven by a fake clock."""
    return CPU(clock=clock, logger=ConsoleLogger(name="CPU", log_level="CRITICAL"))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. set_registers(state, V1=0x10, VF=1)."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)

"""CHIP-8 emulator state structures."""

from typing import Optional

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8cpu.constants import MEMORY_SIZE, DISPLAY_SIZE, NUM_REGISTERS, WORD_MASK, NO_KEY


@dataclass(frozen=True)
class StackState:
    """Call stack of return addresses, most recent last."""
    frames: tuple = ()

    @property
    def depth(self) -> int:
        return len(self.frames)


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state."""
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros(DISPLAY_SIZE, dtype=jnp.uint8))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keyboard: jnp.ndarray = field(default_factory=lambda: jnp.asarray(NO_KEY, dtype=jnp.uint8))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    waiting_for_key: bool = False
    key_register: int = 0
    last_timer_tick: Optional[float] = field(pytree_node=False, default=None)
    shift_sets_carry: bool = field(pytree_node=False, default=False)


def to_u16(value: int) -> jnp.ndarray:
    """Wrap a Python int into a 16-bit register value."""
    return jnp.asarray(int(value) & WORD_MASK, dtype=jnp.uint16)


def to_u8(value: int) -> jnp.ndarray:
    """Wrap a Python int into an 8-bit register value."""
    return jnp.asarray(int(value) & 0xFF, dtype=jnp.uint8)


def set_register(state: EmulatorState, index: int, value: int) -> EmulatorState:
    """Return state with V[index] set to the low byte of value."""
    return state.replace(V=state.V.at[index].set(int(value) & 0xFF))


def create_state(rng: jax.random.PRNGKey = jax.random.PRNGKey(0), shift_sets_carry: bool = False) -> EmulatorState:
    """Create a cold, zero-initialized emulator state.

    Memory is left empty; the font is only installed by ``load_program``.
    """
    return EmulatorState(rng, shift_sets_carry=shift_sets_carry)

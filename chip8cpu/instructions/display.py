"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8cpu.state import EmulatorState, set_register
from chip8cpu.decode import DecodedInstruction
from chip8cpu.constants import SCREEN_WIDTH, DISPLAY_SIZE, ADDRESS_MASK, FLAG_REGISTER

# Bit offsets within a sprite row, most significant bit first
columns = jnp.arange(8)


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - XOR an N-row sprite from memory[I] onto the display at (VX, VY).

    Cells are addressed linearly as ``x + 64 * y``. Writes that land past the
    end of the buffer are dropped; a sprite running off the right edge spills
    into the next row.
    """
    sprite_x = int(state.V[instruction.x])
    sprite_y = int(state.V[instruction.y])
    rows = jnp.arange(instruction.n)

    sprite_bytes = state.memory[(int(state.I) + rows) & ADDRESS_MASK].astype(jnp.int32)
    sprite = (sprite_bytes[:, None] >> (7 - columns[None, :])) & 1

    index = sprite_x + columns[None, :] + SCREEN_WIDTH * (sprite_y + rows[:, None])
    visible = index < DISPLAY_SIZE
    safe_index = jnp.where(visible, index, 0)

    current = state.display[safe_index].astype(jnp.int32)
    collision = bool(jnp.any((sprite & current).astype(jnp.bool_) & visible))

    new_cells = (current ^ sprite).astype(jnp.uint8)
    display = state.display.at[jnp.where(visible, index, DISPLAY_SIZE)].set(new_cells, mode="drop")

    state = state.replace(display=display)
    return set_register(state, FLAG_REGISTER, int(collision))

"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chip8cpu.state import EmulatorState, to_u16
from chip8cpu.decode import DecodedInstruction
from chip8cpu.errors import UnsupportedOpcode
from chip8cpu.stack import pop


def unsupported(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Reject an opcode with no defined semantics."""
    raise UnsupportedOpcode(instruction.raw)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    # pc was already advanced past the 00EE word
    stack, address = pop(state.stack, int(state.pc) - 2)
    return state.replace(stack=stack, pc=to_u16(address))


SYSTEM_INSTRUCTIONS = {
    0x00E0: execute_clear_screen,
    0x00EE: execute_return,
}


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions."""
    handler = SYSTEM_INSTRUCTIONS.get(instruction.raw, unsupported)
    return handler(state, instruction)

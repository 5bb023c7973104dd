"""CHIP-8 control flow instructions."""

from chip8cpu.state import EmulatorState, to_u16
from chip8cpu.decode import DecodedInstruction
from chip8cpu.stack import push
from chip8cpu.instructions.system import unsupported


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=to_u16(instruction.nnn))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, int(state.pc)))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn, require_zero_n: bool = False):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        if require_zero_n and instruction.n != 0:
            return unsupported(state, instruction)
        if condition_fn(state, instruction):
            return state.replace(pc=to_u16(int(state.pc) + 2))
        return state
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) == int(state.V[inst.y]),
    require_zero_n=True,
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: int(state.V[inst.x]) != int(state.V[inst.y]),
    require_zero_n=True,
)

_skip_if_key = make_skip_instruction(
    lambda state, inst: int(state.keyboard) == int(state.V[inst.x])
)

_skip_if_not_key = make_skip_instruction(
    lambda state, inst: int(state.keyboard) != int(state.V[inst.x])
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0."""
    return state.replace(pc=to_u16(instruction.nnn + int(state.V[0])))


def execute_skip_if_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if the latched key equals / differs from VX."""
    if instruction.nn == 0x9E:
        return _skip_if_key(state, instruction)
    if instruction.nn == 0xA1:
        return _skip_if_not_key(state, instruction)
    return unsupported(state, instruction)

"""Main CHIP-8 emulator execution engine."""

from typing import Sequence

import jax.numpy as jnp
from chip8cpu.state import EmulatorState, create_state, set_register, to_u8, to_u16
from chip8cpu.decode import decode
from chip8cpu.errors import ProgramTooLarge
from chip8cpu.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, MEMORY_SIZE, ADDRESS_MASK, WORD_MASK, NO_KEY, TIMER_PERIOD
)
from chip8cpu.instructions.system import execute_system_instruction
from chip8cpu.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chip8cpu.instructions.alu import execute_alu_operation
from chip8cpu.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8cpu.instructions.display import execute_display
from chip8cpu.instructions.misc import execute_misc_instruction

# Indexed by the first nibble of the opcode
INSTRUCTION_FAMILIES = [
    execute_system_instruction,
    execute_jump,
    execute_call,
    execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate,
    execute_skip_if_equal_register,
    execute_set,
    execute_add,
    execute_alu_operation,
    execute_skip_if_not_equal_register,
    execute_set_index,
    execute_jump_with_offset,
    execute_random,
    execute_display,
    execute_skip_if_key,
    execute_misc_instruction,
]

PROGRAM_CAPACITY = MEMORY_SIZE - PROGRAM_START


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Raises:
        UnsupportedOpcode: the instruction has no defined semantics.
        CallStackUnderflow: 00EE with an empty call stack.
    """
    decoded_instruction = decode(instruction)
    return INSTRUCTION_FAMILIES[decoded_instruction.opcode](state, decoded_instruction)


def _pack_u16(high: int, low: int) -> int:
    """Pack two bytes into uint16."""
    return (int(high) << 8) | int(low)


def _unpack_u16(value: int) -> tuple[int, int]:
    """Unpack uint16 into two bytes."""
    return (value >> 8) & 0xFF, value & 0xFF


def fetch(state: EmulatorState) -> tuple[EmulatorState, int]:
    """Fetch next instruction from memory and advance the program counter."""
    pc = int(state.pc)
    instruction = _pack_u16(state.memory[pc & ADDRESS_MASK], state.memory[(pc + 1) & ADDRESS_MASK])
    return state.replace(pc=to_u16(pc + 2)), instruction


def words_to_bytes(program: Sequence[int]) -> list[int]:
    """Flatten 16-bit words into big-endian bytes."""
    data = []
    for word in program:
        word = int(word)
        if not 0 <= word <= WORD_MASK:
            raise ValueError(f"Program word {word:#x} is not a 16-bit value")
        data.extend(_unpack_u16(word))
    return data


def bytes_to_words(data: bytes) -> list[int]:
    """Split a byte stream into big-endian words, dropping an odd trailing byte."""
    return [_pack_u16(data[i], data[i + 1]) for i in range(0, len(data) - 1, 2)]


def load_program(state: EmulatorState, program: Sequence[int]) -> EmulatorState:
    """Reset the machine and install the font and program.

    Everything except the keyboard latch, the RNG stream and the quirk
    configuration is reset. The program starts at 0x200.

    Raises:
        ProgramTooLarge: the program does not fit in memory.
        ValueError: a word is outside 0x0000-0xFFFF.
    """
    if PROGRAM_START + 2 * len(program) > MEMORY_SIZE:
        raise ProgramTooLarge(2 * len(program), PROGRAM_CAPACITY)
    program_bytes = jnp.array(words_to_bytes(program), dtype=jnp.uint8)

    fresh = create_state(state.rng, shift_sets_carry=state.shift_sets_carry)
    memory = fresh.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA)
    memory = memory.at[PROGRAM_START:PROGRAM_START + len(program_bytes)].set(program_bytes)
    return fresh.replace(memory=memory, pc=to_u16(PROGRAM_START), keyboard=state.keyboard)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM file into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, bytes_to_words(rom_data))


def tick_timers(state: EmulatorState, now: float) -> EmulatorState:
    """Decrement both timers once if a full timer period has elapsed since the last tick.

    The first call only records ``now`` as the reference point.
    """
    if state.last_timer_tick is None:
        return state.replace(last_timer_tick=now)
    if now - state.last_timer_tick < TIMER_PERIOD:
        return state
    return state.replace(
        delay_timer=to_u8(max(int(state.delay_timer) - 1, 0)),
        sound_timer=to_u8(max(int(state.sound_timer) - 1, 0)),
        last_timer_tick=now,
    )


def resume_on_key(state: EmulatorState) -> EmulatorState:
    """Complete a pending FX0A once a key is latched, otherwise stay stalled."""
    key = int(state.keyboard)
    if key == NO_KEY:
        return state
    state = set_register(state, state.key_register, key)
    return state.replace(waiting_for_key=False)


def step(state: EmulatorState, now: float) -> EmulatorState:
    """Run one execution cycle: timers, key-wait stall, then fetch and execute."""
    state = tick_timers(state, now)
    if state.waiting_for_key:
        return resume_on_key(state)
    state, instruction = fetch(state)
    return execute(state, instruction)

"""CHIP-8 emulator package."""

from chip8cpu.state import EmulatorState, StackState, create_state
from chip8cpu.emulator import (
    execute, fetch, step, tick_timers, resume_on_key, load_program, load_rom, bytes_to_words
)
from chip8cpu.decode import DecodedInstruction, decode
from chip8cpu.errors import Chip8Error, UnsupportedOpcode, ProgramTooLarge, CallStackUnderflow
from chip8cpu.constants import *
from chip8cpu.cpu import CPU
from chip8cpu.rendering import chip8_display_to_rgb, create_color_scheme

__all__ = [
    "CPU",
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "resume_on_key",
    "load_program",
    "load_rom",
    "bytes_to_words",
    "DecodedInstruction",
    "decode",
    "Chip8Error",
    "UnsupportedOpcode",
    "ProgramTooLarge",
    "CallStackUnderflow",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "DISPLAY_SIZE",
    "chip8_display_to_rgb",
    "create_color_scheme",
]

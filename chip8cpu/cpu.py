"""Stateful CHIP-8 CPU engine for host loops."""

import time
from typing import Callable, Optional, Sequence, Union

import jax
import numpy as np

from chip8cpu.state import EmulatorState, create_state, to_u8
from chip8cpu.emulator import load_program, load_rom, bytes_to_words, step
from chip8cpu.errors import Chip8Error
from chip8cpu.constants import NO_KEY, NUM_KEYS
from chip8cpu.logging import ConsoleLogger


class CPU:
    """CHIP-8 engine owned by a single host loop.

    Wraps the functional core behind the host-facing operations: ``initialize``,
    ``load_program`` and ``step``, plus key input and display/sound output.
    The host decides how often to call ``step``; waiting for a key is a no-op
    step, never a blocking call.

    Any ``Chip8Error`` raised while stepping halts the engine. The faulting
    step is not committed, so ``pc`` still points at the offending opcode, and
    every later ``step`` re-raises the same fault until the engine is reset.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        seed: int = 0,
        shift_sets_carry: bool = False,
        logger: Optional[ConsoleLogger] = None,
    ):
        """Create and cold-reset the engine.

        Args:
            clock: Monotonic time source in seconds, used for timer decay
            seed: Seed for the CXNN random number stream
            shift_sets_carry: Make 8XY6/8XYE write the shifted-out bit to VF
            logger: Logger for lifecycle events and faults
        """
        self.clock = clock
        self.seed = seed
        self.shift_sets_carry = shift_sets_carry
        self.logger = logger or ConsoleLogger(name="CPU")
        self.state: EmulatorState = None
        self.fault: Optional[Chip8Error] = None
        self.initialize()

    def initialize(self):
        """Cold reset: zero memory, registers, stack, timers, display and input."""
        self.state = create_state(jax.random.PRNGKey(self.seed), shift_sets_carry=self.shift_sets_carry)
        self.fault = None
        self.logger.debug("Engine initialized")

    def load_program(self, program: Sequence[int]):
        """Reset the machine and install ``program`` (16-bit words) at 0x200."""
        try:
            self.state = load_program(self.state, program)
        except Chip8Error as err:
            self.logger.error(str(err))
            raise
        self.fault = None
        self.logger.info(f"Loaded program of {len(program)} words")

    def load_rom(self, source: Union[str, bytes, bytearray]):
        """Load a ROM from a file path or from raw bytes."""
        if isinstance(source, (bytes, bytearray)):
            self.load_program(bytes_to_words(source))
            return
        try:
            self.state = load_rom(self.state, source)
        except Chip8Error as err:
            self.logger.error(f"{source}: {err}")
            raise
        self.fault = None
        self.logger.info(f"Loaded ROM {source}")

    def step(self):
        """Run one execution cycle."""
        if self.fault is not None:
            raise self.fault
        try:
            self.state = step(self.state, self.clock())
        except Chip8Error as err:
            self.fault = err
            self.logger.error(f"Halted at PC=0x{self.pc:03X}: {err}")
            raise

    def run(self, n: int):
        """Call ``step`` n times."""
        for _ in range(n):
            self.step()

    def set_key(self, key: int):
        """Latch ``key`` (0x0-0xF) as the currently pressed key."""
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key must be a nibble (0x0-0xF), got {key!r}")
        self.state = self.state.replace(keyboard=to_u8(key))

    def clear_key(self):
        """Release the latched key."""
        self.state = self.state.replace(keyboard=to_u8(NO_KEY))

    @property
    def display(self) -> np.ndarray:
        """Flat 2048-cell framebuffer (64x32, row-major, 0 or 1)."""
        return np.asarray(self.state.display)

    @property
    def sound_timer(self) -> int:
        return int(self.state.sound_timer)

    @property
    def delay_timer(self) -> int:
        return int(self.state.delay_timer)

    @property
    def sound_active(self) -> bool:
        """True while the host should play its tone."""
        return self.sound_timer != 0

    @property
    def pc(self) -> int:
        return int(self.state.pc)

    @property
    def index(self) -> int:
        return int(self.state.I)

    @property
    def registers(self) -> list[int]:
        return [int(v) for v in self.state.V]

    @property
    def keyboard(self) -> int:
        return int(self.state.keyboard)

    @property
    def waiting_for_key(self) -> bool:
        return bool(self.state.waiting_for_key)

    @property
    def halted(self) -> bool:
        return self.fault is not None

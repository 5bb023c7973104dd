"""CHIP-8 engine errors."""


class Chip8Error(Exception):
    """Base class for fatal CHIP-8 engine conditions."""


class UnsupportedOpcode(Chip8Error):
    """Fetched opcode has no defined semantics."""

    def __init__(self, opcode: int):
        self.opcode = opcode
        super().__init__(f"Unsupported opcode {opcode:04X}")


class ProgramTooLarge(Chip8Error):
    """Program does not fit between the program start address and memory end."""

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(f"Program of {size} bytes exceeds the {capacity} bytes available")


class CallStackUnderflow(Chip8Error):
    """Return executed with an empty call stack."""

    def __init__(self, pc: int):
        self.pc = pc
        super().__init__(f"Return with empty call stack at 0x{pc:03X}")

"""CHIP-8 stack operations."""

from chip8cpu.constants import WORD_MASK
from chip8cpu.errors import CallStackUnderflow
from chip8cpu.state import StackState


def push(stack: StackState, address: int) -> StackState:
    """Push address onto stack."""
    return stack.replace(frames=stack.frames + (int(address) & WORD_MASK,))


def pop(stack: StackState, pc: int = 0) -> tuple[StackState, int]:
    """Pop address from stack.

    ``pc`` is only used to describe the failure when the stack is empty.
    """
    if not stack.frames:
        raise CallStackUnderflow(int(pc))
    return stack.replace(frames=stack.frames[:-1]), stack.frames[-1]

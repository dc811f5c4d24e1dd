"""Errors raised by the CHIP-8 machine.

Compiled instruction handlers cannot raise, so they record a status code in
the state instead. ``raise_for_status`` turns that code into one of the
exceptions below once control is back in Python.
"""

from chip8vm.constants import (
    STATUS_OK, STATUS_UNKNOWN_OPCODE, STATUS_STACK_UNDERFLOW, STATUS_STACK_OVERFLOW,
)


class Chip8Error(Exception):
    """Base class for all machine errors."""


class UnknownOpcodeError(Chip8Error):
    """Instruction bit pattern with no handler. Recoverable: PC is already past it."""

    def __init__(self, instruction: int, address: int | None = None):
        self.instruction = instruction
        self.address = address
        where = f" at {address:#05x}" if address is not None else ""
        super().__init__(f"Unknown opcode {instruction:#06x}{where}")


class MachineFault(Chip8Error):
    """Fatal error: the machine instance cannot continue."""

    reason = "machine fault"

    def __init__(self, instruction: int, address: int | None = None):
        self.instruction = instruction
        self.address = address
        where = f" at {address:#05x}" if address is not None else ""
        super().__init__(f"{self.reason} executing {instruction:#06x}{where}")


class StackUnderflowError(MachineFault):
    """Return (00EE) with an empty call stack."""

    reason = "Call stack underflow"


class StackOverflowError(MachineFault):
    """Call (2NNN) with the call stack at capacity."""

    reason = "Call stack overflow"


class DialectError(Chip8Error):
    """A dialect-specific handler was reached under the other dialect.

    Dispatch is gated by the quirk flags, so this signals a bug in the
    emulator rather than in the running program.
    """


class RomTooLargeError(Chip8Error, ValueError):
    """ROM does not fit between the program start and the end of memory."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"ROM is {size} bytes, at most {limit} bytes fit in memory")


_STATUS_ERRORS = {
    STATUS_UNKNOWN_OPCODE: UnknownOpcodeError,
    STATUS_STACK_UNDERFLOW: StackUnderflowError,
    STATUS_STACK_OVERFLOW: StackOverflowError,
}


def error_for_status(status: int, instruction: int, address: int | None = None) -> Chip8Error | None:
    """Build the exception matching a status code, or None for STATUS_OK."""
    if status == STATUS_OK:
        return None
    return _STATUS_ERRORS[status](instruction, address)


def raise_for_status(state, address: int | None = None) -> None:
    """Raise the error recorded in ``state.status``, if any.

    ``address`` is where the faulting instruction was fetched from, when the
    caller knows it.
    """
    error = error_for_status(int(state.status), int(state.fault_instruction), address)
    if error is not None:
        raise error

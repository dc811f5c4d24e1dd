"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, StackState, create_state
from chip8vm.emulator import execute, fetch, step, cycle, update_timers, run_cycles
from chip8vm.memory import load_rom, load_rom_file, read_byte, read_bytes, write_byte
from chip8vm.decode import DecodedInstruction, decode, split
from chip8vm.quirks import Compatibility, Quirks, quirks_for
from chip8vm.keypad import Keypad
from chip8vm.config import MachineConfig
from chip8vm.machine import Machine
from chip8vm.errors import (
    Chip8Error, UnknownOpcodeError, MachineFault, StackUnderflowError,
    StackOverflowError, DialectError, RomTooLargeError, raise_for_status,
)
from chip8vm.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "cycle",
    "update_timers",
    "run_cycles",
    "load_rom",
    "load_rom_file",
    "read_byte",
    "read_bytes",
    "write_byte",
    "DecodedInstruction",
    "decode",
    "split",
    "Compatibility",
    "Quirks",
    "quirks_for",
    "Keypad",
    "MachineConfig",
    "Machine",
    "Chip8Error",
    "UnknownOpcodeError",
    "MachineFault",
    "StackUnderflowError",
    "StackOverflowError",
    "DialectError",
    "RomTooLargeError",
    "raise_for_status",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "STACK_SIZE",
    "MEMORY_SIZE",
]

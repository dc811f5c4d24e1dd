"""CHIP-8 memory map: font table, ROM loading and host-side byte access.

Memory is a flat ``uint8[4096]`` array. The font table lives at ``FONT_START``
and is written once when the state is created; programs are loaded at
``PROGRAM_START``. A ROM that does not fit between ``PROGRAM_START`` and the
end of memory is rejected with ``RomTooLargeError``, never truncated.
"""

from typing import TYPE_CHECKING

import jax.numpy as jnp

from chip8vm.constants import FONT_START, FONT_DATA, MEMORY_SIZE, PROGRAM_START
from chip8vm.errors import RomTooLargeError

if TYPE_CHECKING:
    from chip8vm.state import EmulatorState

MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START


def load_fonts(memory: jnp.ndarray) -> jnp.ndarray:
    """Write the hex digit sprites at FONT_START."""
    return memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA)


def load_rom(state: "EmulatorState", rom: bytes) -> "EmulatorState":
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    rom = bytes(rom)
    if len(rom) > MAX_ROM_SIZE:
        raise RomTooLargeError(len(rom), MAX_ROM_SIZE)
    if not rom:
        return state
    rom_array = jnp.array(list(rom), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom_file(state: "EmulatorState", filename: str) -> "EmulatorState":
    """Read a ROM file and load it at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_rom(state, rom_data)


def _check_address(address: int, length: int = 1):
    if address < 0 or length < 0 or address + length > MEMORY_SIZE:
        raise IndexError(
            f"Memory access [{address:#05x}, {address + length:#05x}) "
            f"outside [0x000, {MEMORY_SIZE:#05x})"
        )


def read_byte(state: "EmulatorState", address: int) -> int:
    """Read one byte. Addresses outside 0x000-0xFFF raise IndexError."""
    _check_address(address)
    return int(state.memory[address])


def read_bytes(state: "EmulatorState", address: int, length: int) -> bytes:
    """Read ``length`` consecutive bytes starting at ``address``."""
    _check_address(address, length)
    return bytes(int(b) for b in state.memory[address:address + length])


def write_byte(state: "EmulatorState", address: int, value: int) -> "EmulatorState":
    """Write one byte, masked to 8 bits."""
    _check_address(address)
    return state.replace(memory=state.memory.at[address].set(value & 0xFF))

"""Tests for the memory map: fonts, ROM loading and host byte access."""

import jax.numpy as jnp
import pytest
from chip8vm import (
    create_state, load_rom, load_rom_file, read_byte, read_bytes, write_byte,
    RomTooLargeError, FONT_START, PROGRAM_START, MEMORY_SIZE,
)
from chip8vm.constants import FONT_DATA


def test_fonts_loaded_at_creation(fresh_state):
    font = fresh_state.memory[FONT_START:FONT_START + 80]
    assert jnp.array_equal(font, FONT_DATA)
    assert read_bytes(fresh_state, FONT_START, 5) == bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])


def test_rest_of_low_memory_is_zero(fresh_state):
    assert not jnp.any(fresh_state.memory[:FONT_START])
    assert not jnp.any(fresh_state.memory[FONT_START + 80:PROGRAM_START])


def test_initial_registers(fresh_state):
    assert fresh_state.pc == PROGRAM_START
    assert fresh_state.I == 0
    assert not jnp.any(fresh_state.V)
    assert fresh_state.stack.pointer == 0
    assert fresh_state.delay_timer == 0
    assert fresh_state.sound_timer == 0


def test_load_rom(fresh_state):
    state = load_rom(fresh_state, bytes([0xAB, 0xCD]))

    assert read_bytes(state, PROGRAM_START, 2) == b"\xab\xcd"
    assert read_byte(state, PROGRAM_START + 2) == 0
    assert jnp.array_equal(state.memory[FONT_START:FONT_START + 80], FONT_DATA)


def test_load_empty_rom(fresh_state):
    state = load_rom(fresh_state, b"")
    assert jnp.array_equal(state.memory, fresh_state.memory)


def test_load_rom_filling_memory(fresh_state):
    rom = bytes(range(256)) * ((MEMORY_SIZE - PROGRAM_START) // 256)
    state = load_rom(fresh_state, rom)
    assert read_byte(state, MEMORY_SIZE - 1) == 0xFF


def test_load_rom_too_large(fresh_state):
    with pytest.raises(RomTooLargeError) as excinfo:
        load_rom(fresh_state, bytes(MEMORY_SIZE - PROGRAM_START + 1))
    assert excinfo.value.limit == MEMORY_SIZE - PROGRAM_START
    assert isinstance(excinfo.value, ValueError)


def test_load_rom_file(fresh_state, tmp_path):
    rom_path = tmp_path / "test.ch8"
    rom_path.write_bytes(bytes([0x60, 0x2A, 0x12, 0x02]))

    state = load_rom_file(fresh_state, str(rom_path))

    assert read_bytes(state, PROGRAM_START, 4) == b"\x60\x2a\x12\x02"


def test_write_byte_masks_value(fresh_state):
    state = write_byte(fresh_state, 0x300, 0x1FF)
    assert read_byte(state, 0x300) == 0xFF


@pytest.mark.parametrize("address", [-1, MEMORY_SIZE, 0x1FFF])
def test_out_of_range_access(fresh_state, address):
    with pytest.raises(IndexError):
        read_byte(fresh_state, address)
    with pytest.raises(IndexError):
        write_byte(fresh_state, address, 0)


def test_read_bytes_past_end(fresh_state):
    with pytest.raises(IndexError):
        read_bytes(fresh_state, MEMORY_SIZE - 2, 3)


def test_original_dialect_state(legacy_state):
    assert legacy_state.quirks.shift_copies_source
    assert not legacy_state.quirks.jump_uses_x_register
    assert legacy_state.quirks.store_load_advances_index


def test_create_state_accepts_dialect_name():
    state = create_state(compatibility="original")
    assert state.quirks.store_load_advances_index

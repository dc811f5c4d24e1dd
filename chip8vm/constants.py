"""CHIP-8 machine constants."""

import jax.numpy as jnp

MEMORY_SIZE = 4096
ADDRESS_MASK = 0xFFF
PROGRAM_START = 0x200
FONT_START = 0x050
FONT_GLYPH_SIZE = 5

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
SPRITE_WIDTH = 8

NUM_REGISTERS = 16
FLAG_REGISTER = 0xF
NUM_KEYS = 16
STACK_SIZE = 16

TIMER_FREQUENCY = 60
DEFAULT_INSTRUCTION_FREQUENCY = 700

# Status codes recorded in EmulatorState.status after each instruction
STATUS_OK = 0
STATUS_UNKNOWN_OPCODE = 1
STATUS_STACK_UNDERFLOW = 2
STATUS_STACK_OVERFLOW = 3
FATAL_STATUSES = (STATUS_STACK_UNDERFLOW, STATUS_STACK_OVERFLOW)

FONT_DATA = jnp.array([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
], dtype=jnp.uint8)

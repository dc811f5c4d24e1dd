"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FONT_START, FONT_GLYPH_SIZE, FLAG_REGISTER, NUM_REGISTERS, ADDRESS_MASK
from chip8vm.instructions.system import unknown_opcode


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I, wrapping at 16 bits. VF = 1 when the sum passes 0xFFF."""
    total = jnp.astype(state.I, jnp.int32) + state.V[instruction.x]
    overflow_flag = jnp.astype(total > ADDRESS_MASK, jnp.uint8)
    return state.replace(
        I=jnp.astype(total & 0xFFFF, jnp.uint16),
        V=state.V.at[FLAG_REGISTER].set(overflow_flag)
    )


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Without a held key the PC is moved back onto this instruction, so the
    next cycle fetches it again.
    """
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        return state.replace(V=state.V.at[instruction.x].set(pressed_key))

    def wait_action(state):
        return state.replace(pc=state.pc - 2)

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for the low nibble of VX."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.int32)
    font_address = FONT_START + digit * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + jnp.astype(state.I, jnp.int32)
    new_memory = state.memory.at[indices].set(digits)
    return state.replace(memory=new_memory)


def _advance_index(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    if state.quirks.store_load_advances_index:
        return jnp.astype(state.I + instruction.x + 1, jnp.uint16)
    return state.I


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    current_memory_values = state.memory[base_indices]
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    new_memory = state.memory.at[base_indices].set(new_memory_values)
    return state.replace(memory=new_memory, I=_advance_index(state, instruction))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    memory_values = state.memory[base_indices]
    new_V = jnp.where(register_mask, memory_values, state.V)
    return state.replace(V=new_V, I=_advance_index(state, instruction))


MISC_HANDLERS = [
    (0x07, execute_get_delay_timer),
    (0x0A, execute_wait_for_key),
    (0x15, execute_set_delay_timer),
    (0x18, execute_set_sound_timer),
    (0x1E, execute_add_to_index),
    (0x29, execute_font_character),
    (0x33, execute_bcd_conversion),
    (0x55, execute_store_registers),
    (0x65, execute_load_registers),
]

# Low byte -> position in MISC_HANDLERS; anything unmapped lands on unknown_opcode
MISC_SELECTOR = jnp.full(256, len(MISC_HANDLERS), dtype=jnp.int32).at[
    jnp.array([code for code, _ in MISC_HANDLERS])
].set(jnp.arange(len(MISC_HANDLERS), dtype=jnp.int32))


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions on the low byte."""
    return jax.lax.switch(
        MISC_SELECTOR[instruction.nn],
        [handler for _, handler in MISC_HANDLERS] + [unknown_opcode],
        state, instruction
    )

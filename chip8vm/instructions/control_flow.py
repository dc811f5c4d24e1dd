"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import ADDRESS_MASK, STATUS_STACK_OVERFLOW
from chip8vm.errors import DialectError
from chip8vm.stack import push, is_full
from chip8vm.instructions.system import set_status, unknown_opcode


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    def _call(state):
        state = state.replace(stack=push(state.stack, state.pc))
        return execute_jump(state, instruction)

    return jax.lax.cond(
        is_full(state.stack),
        lambda state: set_status(state, instruction, STATUS_STACK_OVERFLOW),
        _call,
        state
    )


def skip_next(state: EmulatorState) -> EmulatorState:
    return state.replace(pc=state.pc + 2)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            skip_next,
            lambda s: s,
            state
        )
    return skip_instruction


def require_zero_low_nibble(handler):
    """5XY0/9XY0 are only defined with a zero low nibble."""
    def checked(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        return jax.lax.cond(
            instruction.n == 0,
            handler,
            unknown_opcode,
            state, instruction
        )
    return checked


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = require_zero_low_nibble(make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
))

execute_skip_if_not_equal_register = require_zero_low_nibble(make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
))


def execute_jump_with_offset_modern(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BXNN - Jump to address XNN + VX (modern behavior)."""
    if not state.quirks.jump_uses_x_register:
        raise DialectError("BXNN reached in a dialect that decodes family 0xB as BNNN")
    register_value = state.V[instruction.x]
    jump_address = (instruction.nnn + jnp.astype(register_value, jnp.uint16)) & ADDRESS_MASK
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


def execute_jump_with_offset_legacy(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0 (legacy behavior)."""
    if state.quirks.jump_uses_x_register:
        raise DialectError("BNNN reached in a dialect that decodes family 0xB as BXNN")
    jump_address = (instruction.nnn + jnp.astype(state.V[0], jnp.uint16)) & ADDRESS_MASK
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Bxxx - Dispatch on the active dialect."""
    if state.quirks.jump_uses_x_register:
        return execute_jump_with_offset_modern(state, instruction)
    return execute_jump_with_offset_legacy(state, instruction)


def execute_skip_if_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if key pressed/not pressed."""
    key_index = state.V[instruction.x] & 0xF
    key_pressed = state.keypad[key_index] & (state.V[instruction.x] <= 0xF)
    is_not_instruction = (instruction.nn == 0xA1)
    condition = key_pressed ^ is_not_instruction

    return jax.lax.cond(
        condition,
        skip_next,
        lambda state: state,
        state
    )


def execute_key_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Exxx - Only EX9E and EXA1 are defined."""
    return jax.lax.cond(
        (instruction.nn == 0x9E) | (instruction.nn == 0xA1),
        execute_skip_if_key,
        unknown_opcode,
        state, instruction
    )

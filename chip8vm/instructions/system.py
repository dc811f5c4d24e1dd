"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import STATUS_UNKNOWN_OPCODE, STATUS_STACK_UNDERFLOW
from chip8vm.stack import pop, is_empty


def set_status(state: EmulatorState, instruction: DecodedInstruction, status: int) -> EmulatorState:
    """Record a non-OK outcome for the current instruction."""
    return state.replace(
        status=jnp.astype(status, jnp.uint8),
        fault_instruction=jnp.astype(instruction.raw, jnp.uint16),
    )


def unknown_opcode(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Unmapped bit pattern: flag it and leave everything else untouched."""
    return set_status(state, instruction, STATUS_UNKNOWN_OPCODE)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    def _return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(
        is_empty(state.stack),
        lambda state: set_status(state, instruction, STATUS_STACK_UNDERFLOW),
        _return,
        state
    )


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions. 0NNN machine code routines are not supported."""
    return jax.lax.cond(
        0x00E0 == instruction.raw,
        execute_clear_screen,
        lambda state, instruction: jax.lax.cond(
            0x00EE == instruction.raw,
            execute_return,
            unknown_opcode,
            state, instruction
        ),
        state, instruction
    )

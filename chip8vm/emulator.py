"""Main CHIP-8 emulator execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import decode
from chip8vm.constants import (
    ADDRESS_MASK, STATUS_OK, STATUS_STACK_UNDERFLOW, STATUS_STACK_OVERFLOW, TIMER_FREQUENCY,
    DEFAULT_INSTRUCTION_FREQUENCY,
)
from chip8vm.instructions.system import execute_system_instruction
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_key_instruction
)
from chip8vm.instructions.alu import execute_alu_operation
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import execute_misc_instruction


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    The outcome is left in ``state.status``: STATUS_OK, or the code of the
    error the instruction raised, with the instruction in
    ``state.fault_instruction``.
    """
    decoded_instruction = decode(instruction)
    state = state.replace(status=jnp.astype(STATUS_OK, jnp.uint8))

    return jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_key_instruction,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory. PC stays within 0x000-0xFFF."""
    instruction = _pack_u16(
        state.memory[state.pc & ADDRESS_MASK],
        state.memory[(state.pc + 1) & ADDRESS_MASK],
    )
    return state.replace(pc=(state.pc + 2) & ADDRESS_MASK), instruction


def update_timers(state: EmulatorState, instruction_frequency: int = DEFAULT_INSTRUCTION_FREQUENCY) -> EmulatorState:
    """Advance the 60 Hz timers by one instruction period.

    The accumulator counts in units of 1 / (60 * instruction_frequency)
    seconds: each cycle adds 60 and every full ``instruction_frequency`` is one
    timer tick. The remainder carries over, so timers keep 60 Hz for any
    instruction rate.
    """
    accumulator = state.timer_accumulator + TIMER_FREQUENCY
    ticks = accumulator // instruction_frequency
    accumulator = accumulator % instruction_frequency

    def _decrement(timer):
        return jnp.astype(jnp.maximum(jnp.astype(timer, jnp.int32) - ticks, 0), jnp.uint8)

    return state.replace(
        delay_timer=_decrement(state.delay_timer),
        sound_timer=_decrement(state.sound_timer),
        timer_accumulator=jnp.astype(accumulator, jnp.int32),
    )


def is_halted(state: EmulatorState) -> jnp.ndarray:
    return (state.status == STATUS_STACK_UNDERFLOW) | (state.status == STATUS_STACK_OVERFLOW)


def step(state: EmulatorState, instruction_frequency: int = DEFAULT_INSTRUCTION_FREQUENCY) -> EmulatorState:
    """Run one machine cycle: fetch, execute, update timers.

    A state halted by a fatal fault is returned unchanged.
    """
    def _cycle(state):
        state, instruction = fetch(state)
        state = execute(state, instruction)
        return update_timers(state, instruction_frequency)

    return jax.lax.cond(is_halted(state), lambda s: s, _cycle, state)


cycle = jax.jit(step, static_argnums=1)


def run_instruction(state, _, instruction_frequency=DEFAULT_INSTRUCTION_FREQUENCY):
    state = step(state, instruction_frequency)
    return state, None


@partial(jax.jit, static_argnums=(1, 2))
def run_cycles(state: EmulatorState, n: int, instruction_frequency: int = DEFAULT_INSTRUCTION_FREQUENCY) -> EmulatorState:
    """Run ``n`` cycles in one compiled loop. Stops making progress once halted."""
    state, _ = jax.lax.scan(
        partial(run_instruction, instruction_frequency=instruction_frequency),
        state, length=n
    )
    return state

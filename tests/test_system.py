"""Tests for system instructions (0xxx) and the call stack."""

import jax.numpy as jnp
import pytest
from chip8vm import execute, STACK_SIZE, PROGRAM_START
from chip8vm.constants import (
    STATUS_OK, STATUS_UNKNOWN_OPCODE, STATUS_STACK_UNDERFLOW, STATUS_STACK_OVERFLOW,
)


def test_execute_clear_screen(fresh_state):
    """Test 00E0 - Clear display."""
    state = fresh_state.replace(display=fresh_state.display.at[0, 0].set(1))

    state = execute(state, 0x00E0)

    assert jnp.sum(state.display) == 0


def test_clear_all_lit_screen(fresh_state):
    """00E0 on an all-lit framebuffer leaves every pixel unlit."""
    state = fresh_state.replace(display=jnp.ones_like(fresh_state.display))

    state = execute(state, 0x00E0)

    assert not jnp.any(state.display)
    assert state.display.shape == (64, 32)


def test_execute_call_and_return(fresh_state):
    """Test 2NNN (call) and 00EE (return) together."""
    state = fresh_state
    initial_pc = state.pc

    # Call subroutine
    state = execute(state, 0x2300)  # Call 0x300
    assert state.pc == 0x300
    assert state.stack.data[state.stack.pointer - 1] == initial_pc

    # Return from subroutine
    state = execute(state, 0x00EE)  # Return
    assert state.pc == initial_pc
    assert state.stack.pointer == 0


def test_execute_return_after_call(fresh_state):
    """Test return restores correct address."""
    state = fresh_state

    # Call then return
    state = execute(state, 0x2400)  # Call 0x400
    call_pc = state.pc
    state = execute(state, 0x00EE)  # Return

    assert state.pc != call_pc  # No longer at called address


def test_nested_calls_return_in_order(fresh_state):
    state = execute(fresh_state, 0x2300)
    state = execute(state, 0x2400)
    state = execute(state, 0x2500)
    assert state.stack.pointer == 3

    state = execute(state, 0x00EE)
    assert state.pc == 0x400
    state = execute(state, 0x00EE)
    assert state.pc == 0x300
    state = execute(state, 0x00EE)
    assert state.pc == PROGRAM_START


class TestStackFaults:
    """Call stack bounds."""

    def test_return_with_empty_stack(self, fresh_state):
        """00EE with nothing to return to is a fatal fault; PC stays put."""
        initial_pc = fresh_state.pc

        state = execute(fresh_state, 0x00EE)

        assert state.status == STATUS_STACK_UNDERFLOW
        assert state.fault_instruction == 0x00EE
        assert state.pc == initial_pc
        assert state.stack.pointer == 0

    def test_call_fills_stack(self, fresh_state):
        state = fresh_state
        for depth in range(STACK_SIZE):
            state = execute(state, 0x2300)
            assert state.status == STATUS_OK
        assert state.stack.pointer == STACK_SIZE

    def test_call_with_full_stack(self, fresh_state):
        """2NNN past the stack capacity is a fatal fault; PC and stack stay put."""
        state = fresh_state
        for _ in range(STACK_SIZE):
            state = execute(state, 0x2300)
        data_before = state.stack.data

        state = execute(state, 0x2456)

        assert state.status == STATUS_STACK_OVERFLOW
        assert state.fault_instruction == 0x2456
        assert state.pc == 0x300
        assert state.stack.pointer == STACK_SIZE
        assert jnp.array_equal(state.stack.data, data_before)


class TestUnknownSystemInstructions:
    """0NNN machine code routines are not supported."""

    @pytest.mark.parametrize("instruction", [0x0000, 0x0123, 0x00E1, 0x00EF, 0x0FFF])
    def test_unknown_system_instruction(self, fresh_state, instruction):
        state = fresh_state.replace(display=fresh_state.display.at[3, 4].set(True))

        state = execute(state, instruction)

        assert state.status == STATUS_UNKNOWN_OPCODE
        assert state.fault_instruction == instruction
        assert state.display[3, 4]
        assert state.pc == fresh_state.pc

    def test_status_is_reset_by_next_instruction(self, fresh_state):
        state = execute(fresh_state, 0x0123)
        assert state.status == STATUS_UNKNOWN_OPCODE

        state = execute(state, 0x6001)
        assert state.status == STATUS_OK

"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state, Compatibility, Machine
from chip8vm.logging import MachineLogger


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def modern_state():
    """Provide a fresh state in the New dialect."""
    return create_state(compatibility=Compatibility.NEW)


@pytest.fixture
def legacy_state():
    """Provide a fresh state in the Original dialect."""
    return create_state(compatibility=Compatibility.ORIGINAL)


@pytest.fixture
def quiet_logger():
    return MachineLogger(log_level="CRITICAL")


@pytest.fixture
def machine(quiet_logger):
    """Provide a New-dialect machine with logging silenced."""
    return Machine(logger=quiet_logger)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def program(*instructions):
    """Assemble 16-bit instructions into big-endian ROM bytes."""
    return b"".join(i.to_bytes(2, "big") for i in instructions)

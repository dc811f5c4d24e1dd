"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8vm.constants import (
    PROGRAM_START, MEMORY_SIZE, SCREEN_WIDTH, SCREEN_HEIGHT, STACK_SIZE,
    NUM_REGISTERS, NUM_KEYS, STATUS_OK, FATAL_STATUSES,
)
from chip8vm.memory import load_fonts
from chip8vm.quirks import Compatibility, Quirks, quirks_for


@dataclass(frozen=True)
class StackState:
    """Bounded stack of return addresses for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    ``display`` is indexed ``[x, y]``. ``keypad`` is the snapshot of the host
    keypad taken at the start of the current cycle, with at most one key set.
    ``status`` holds the outcome of the last executed instruction and
    ``fault_instruction`` the raw instruction that produced a non-OK status.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    stack: StackState = field(default_factory=lambda: StackState())
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    timer_accumulator: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    status: jnp.ndarray = field(default_factory=lambda: jnp.astype(STATUS_OK, jnp.uint8))
    fault_instruction: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    compatibility: Compatibility = field(pytree_node=False, default=Compatibility.NEW)

    @property
    def quirks(self) -> Quirks:
        return quirks_for(self.compatibility)

    @property
    def halted(self) -> bool:
        """True once a fatal fault has been recorded. Host-side only."""
        return int(self.status) in FATAL_STATUSES


def create_state(
    rng: jax.random.PRNGKey = jax.random.PRNGKey(0),
    compatibility: Compatibility = Compatibility.NEW,
) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    state = EmulatorState(rng, compatibility=Compatibility.parse(compatibility))
    return state.replace(memory=load_fonts(state.memory))

"""CHIP-8 ALU operations (8xxx).

Every operation maps ``(vx, vy, vf)`` to ``(new_vx, new_vf)``. Operations
that do not touch the flag pass ``vf`` through. VX is written before VF, so
when X is F the flag value wins.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FLAG_REGISTER
from chip8vm.instructions.system import unknown_opcode


def alu_set(vx, vy, vf):
    """8XY0 - Set: VX = VY."""
    return vy, vf


def alu_or(vx, vy, vf):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, vf


def alu_and(vx, vy, vf):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, vf


def alu_xor(vx, vy, vf):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, vf


def alu_add(vx, vy, vf):
    """8XY4 - Add: VX += VY, set carry flag."""
    result = jnp.astype(vx, jnp.int32) + vy
    carry = jnp.astype(result > 255, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx, vy, vf):
    """8XY5 - Subtract: VX -= VY, VF = 1 when no borrow."""
    no_borrow = jnp.astype(vx >= vy, jnp.uint8)
    return (vx - vy) & 0xFF, no_borrow


def alu_shift_right(vx, vy, vf):
    """8XY6 - Shift right: VX >>= 1, VF = bit shifted out."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx, vy, vf):
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when no borrow."""
    no_borrow = jnp.astype(vy >= vx, jnp.uint8)
    return (vy - vx) & 0xFF, no_borrow


def alu_shift_left(vx, vy, vf):
    """8XYE - Shift left: VX <<= 1, VF = bit shifted out."""
    return (vx << 1) & 0xFF, (vx & 0x80) >> 7


# Low nibble -> position in the handler list; -1 marks unmapped operations
ALU_SELECTOR = jnp.array([0, 1, 2, 3, 4, 5, 6, 7, -1, -1, -1, -1, -1, -1, 8, -1], dtype=jnp.int32)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    shift_copies_source = state.quirks.shift_copies_source

    def _alu_shift_right(vx, vy, vf):
        if shift_copies_source:
            vx = vy
        return alu_shift_right(vx, vy, vf)

    def _alu_shift_left(vx, vy, vf):
        if shift_copies_source:
            vx = vy
        return alu_shift_left(vx, vy, vf)

    def _apply(state: EmulatorState) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        vf = state.V[FLAG_REGISTER]
        result, new_vf = jax.lax.switch(
            selector,
            [alu_set, alu_or, alu_and, alu_xor, alu_add,
             alu_sub_xy, _alu_shift_right, alu_sub_yx, _alu_shift_left],
            vx, vy, vf
        )
        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(new_vf, jnp.uint8))
        return state.replace(V=new_V)

    selector = ALU_SELECTOR[instruction.n]
    return jax.lax.cond(
        selector >= 0,
        _apply,
        lambda state: unknown_opcode(state, instruction),
        state
    )

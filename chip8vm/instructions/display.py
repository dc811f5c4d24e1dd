"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, FLAG_REGISTER

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Only the origin wraps around the screen. Sprite columns past the right
    edge and rows past the bottom edge are clipped.
    """
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    in_sprite = (
        (xx >= sprite_x) & (xx < sprite_x + SPRITE_WIDTH)
        & (yy >= sprite_y) & (yy < sprite_y + instruction.n)
    )

    row_offset = jnp.where(in_sprite, yy - sprite_y, 0)
    col_offset = jnp.where(in_sprite, xx - sprite_x, 0)
    sprite_bytes = jnp.astype(state.memory[jnp.astype(state.I, jnp.int32) + row_offset], jnp.int32)
    sprite = (((sprite_bytes >> (SPRITE_WIDTH - 1 - col_offset)) & 1) == 1) & in_sprite

    collision = jnp.any(state.display & sprite)
    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )

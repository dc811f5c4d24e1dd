"""Host keypad shared between an input handler and the machine.

The input side calls ``set_key``/``unset_key`` from whatever thread delivers
key events; the machine reads one consistent ``(key, pressed)`` pair per
cycle through ``snapshot``. Only one key is held at a time.
"""

import threading

import jax.numpy as jnp

from chip8vm.constants import NUM_KEYS


class Keypad:
    """Thread-safe single-key CHIP-8 keypad."""

    def __init__(self):
        self._lock = threading.Lock()
        self._current_key = 0x0
        self._is_key_pressed = False

    def set_key(self, key: int):
        """Hold ``key`` (0x0-0xF), replacing any key currently held."""
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key code must be in 0x0-0xF, got {key!r}")
        with self._lock:
            self._current_key = key
            self._is_key_pressed = True

    def unset_key(self):
        with self._lock:
            self._current_key = 0x0
            self._is_key_pressed = False

    def get_current_key(self) -> int:
        with self._lock:
            return self._current_key

    def is_key_pressed(self) -> bool:
        with self._lock:
            return self._is_key_pressed

    def snapshot(self) -> tuple[int, bool]:
        """Read key and pressed state together."""
        with self._lock:
            return self._current_key, self._is_key_pressed

    def as_array(self) -> jnp.ndarray:
        """One-hot ``bool[16]`` view of a single snapshot, as stored in the state."""
        key, pressed = self.snapshot()
        return jnp.zeros(NUM_KEYS, dtype=jnp.bool_).at[key].set(pressed)

    def __repr__(self):
        key, pressed = self.snapshot()
        return f"Keypad(key={key:#x}, pressed={pressed})"

"""Host-facing CHIP-8 machine.

``Machine`` owns one emulator state and drives it one ``cycle()`` at a time.
Compiled cycles report problems through ``state.status``; the machine turns
those into exceptions, logs them, and keeps track of fatal faults.
"""

import time
from typing import Any, Callable, Mapping, Optional

import jax
import numpy as np

from chip8vm.config import MachineConfig
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT
from chip8vm.emulator import cycle, run_cycles
from chip8vm.errors import UnknownOpcodeError, MachineFault, raise_for_status
from chip8vm.keypad import Keypad
from chip8vm.logging import MachineLogger, build_progress_bar
from chip8vm.memory import load_rom
from chip8vm.quirks import Compatibility, Quirks
from chip8vm.state import EmulatorState, create_state


class Machine:
    """A CHIP-8 machine driven by repeated ``cycle()`` calls.

    Args:
        config: MachineConfig, or a mapping of its fields
        keypad: Keypad shared with the host input handler. A private one is
            created when omitted
        rng: PRNG key for CXNN. Derived from ``config.seed`` when omitted
        logger: Logger for machine events
        on_sound: Called with True when the sound timer becomes non-zero and
            with False when it reaches zero again
    """

    def __init__(
        self,
        config: MachineConfig | Mapping[str, Any] | None = None,
        keypad: Optional[Keypad] = None,
        rng: Optional[jax.Array] = None,
        logger: Optional[MachineLogger] = None,
        on_sound: Optional[Callable[[bool], None]] = None,
    ):
        self.config = config if isinstance(config, MachineConfig) else MachineConfig.from_dict(config)
        self.keypad = keypad if keypad is not None else Keypad()
        self.rng = rng if rng is not None else jax.random.PRNGKey(self.config.seed)
        self.logger = logger or MachineLogger(log_level=self.config.log_level)
        self.on_sound = on_sound

        self.fault: Optional[MachineFault] = None
        self._rom = b""
        self._sound_on = False
        self.state: EmulatorState = create_state(self.rng, self.compatibility)

        self.logger.log_machine_start(self.config.compatibility, self.config.instruction_frequency)

    @property
    def compatibility(self) -> Compatibility:
        return self.config.compatibility_mode

    @property
    def quirks(self) -> Quirks:
        return self.state.quirks

    @property
    def halted(self) -> bool:
        return self.fault is not None

    @property
    def sound_on(self) -> bool:
        return self._sound_on

    @property
    def display(self) -> np.ndarray:
        """Framebuffer as a ``bool[64, 32]`` array indexed ``[x, y]``."""
        return np.asarray(self.state.display, dtype=np.bool_)

    def display_as_text(self, on: str = "#", off: str = ".") -> str:
        """Framebuffer as 32 lines of 64 characters."""
        pixels = self.display
        return "\n".join(
            "".join(on if pixels[x, y] else off for x in range(SCREEN_WIDTH))
            for y in range(SCREEN_HEIGHT)
        )

    def load_rom(self, rom: bytes, source: Optional[str] = None):
        """Load ROM bytes at 0x200. Raises RomTooLargeError if they do not fit."""
        self.state = load_rom(self.state, rom)
        self._rom = bytes(rom)
        self.logger.log_rom_loaded(len(self._rom), source)

    def load_rom_file(self, filename: str):
        with open(filename, 'rb') as f:
            rom_data = f.read()
        self.load_rom(rom_data, source=filename)

    def reset(self):
        """Return to the power-on state with the same ROM loaded."""
        self.fault = None
        self.state = load_rom(create_state(self.rng, self.compatibility), self._rom)
        self._set_sound(False)

    def cycle(self):
        """Execute one instruction and advance the timers.

        Raises:
            UnknownOpcodeError: the instruction had no handler. The machine
                stays runnable; PC already points past it.
            StackUnderflowError, StackOverflowError: fatal. Every later call
                raises the same error until ``reset()``.
        """
        if self.fault is not None:
            raise self.fault

        address = int(self.state.pc)
        state = self.state.replace(keypad=self.keypad.as_array())
        self.state = cycle(state, self.config.instruction_frequency)
        self._set_sound(int(self.state.sound_timer) > 0)
        self._check_status(address)

    def run(self, cycles: int, progress: bool = False) -> int:
        """Run ``cycles`` cycles, skipping unknown opcodes.

        Fatal faults propagate. Returns the number of unknown opcodes skipped.
        """
        skipped = 0
        start = time.time()
        with build_progress_bar(cycles, enabled=progress) as bar:
            for _ in range(cycles):
                try:
                    self.cycle()
                except UnknownOpcodeError:
                    skipped += 1
                bar.update(1)
        self.logger.log_run_end(cycles, time.time() - start)
        return skipped

    def run_compiled(self, cycles: int):
        """Run ``cycles`` cycles in one compiled loop.

        The keypad is sampled once, before the loop. Unknown opcodes are not
        reported individually; a fatal fault is raised after the loop.
        """
        if self.fault is not None:
            raise self.fault

        state = self.state.replace(keypad=self.keypad.as_array())
        self.state = run_cycles(state, cycles, self.config.instruction_frequency)
        self._set_sound(int(self.state.sound_timer) > 0)
        if self.state.halted:
            self._check_status(None)

    def _check_status(self, address: Optional[int]):
        try:
            raise_for_status(self.state, address)
        except UnknownOpcodeError as e:
            self.logger.log_unknown_opcode(e.instruction, address if address is not None else -1)
            raise
        except MachineFault as e:
            self.fault = e
            self.logger.log_fault(e)
            raise

    def _set_sound(self, sound_on: bool):
        if sound_on != self._sound_on:
            self._sound_on = sound_on
            if self.on_sound is not None:
                self.on_sound(sound_on)

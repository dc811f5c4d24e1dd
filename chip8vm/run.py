"""Run a CHIP-8 ROM headless and print the final framebuffer.

Usage:
    python -m chip8vm.run rom=roms/ibm_logo.ch8 cycles=2000 machine.compatibility=original
"""

import hydra
from omegaconf import DictConfig, OmegaConf

from chip8vm.config import MachineConfig
from chip8vm.errors import MachineFault
from chip8vm.machine import Machine


def run_rom(cfg: DictConfig) -> Machine:
    """Build a machine from ``cfg``, load the ROM and run it."""
    machine = Machine(MachineConfig.from_dict(cfg.machine))
    machine.load_rom_file(hydra.utils.to_absolute_path(cfg.rom))

    try:
        if cfg.compiled:
            machine.run_compiled(cfg.cycles)
        else:
            machine.run(cfg.cycles, progress=cfg.progress)
    except MachineFault:
        # Already logged by the machine; still show the last frame
        pass

    if cfg.print_display:
        print(machine.display_as_text())
    return machine


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    machine = run_rom(cfg)
    if machine.halted:
        raise SystemExit(1)


if __name__ == "__main__":
    main()

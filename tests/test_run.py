"""Tests for the headless runner."""

from omegaconf import OmegaConf
from chip8vm.run import run_rom
from conftest import program


def make_cfg(rom_path, **overrides):
    cfg = OmegaConf.create({
        "rom": str(rom_path),
        "cycles": 10,
        "compiled": False,
        "progress": False,
        "print_display": True,
        "machine": {
            "compatibility": "new",
            "instruction_frequency": 700,
            "seed": 0,
            "log_level": "CRITICAL",
        },
    })
    return OmegaConf.merge(cfg, overrides)


def test_run_rom_prints_display(tmp_path, capsys):
    rom_path = tmp_path / "dot.ch8"
    # I = glyph '1'; draw at (0, 0); spin
    rom_path.write_bytes(program(0x6001, 0xF029, 0x6000, 0xD005, 0x1208))

    machine = run_rom(make_cfg(rom_path))

    out = capsys.readouterr().out.splitlines()
    assert len(out) == 32
    assert out[0].startswith("..#.")  # Glyph '1' top row: 0x20
    assert not machine.halted


def test_run_rom_compiled(tmp_path):
    rom_path = tmp_path / "count.ch8"
    rom_path.write_bytes(program(0x7001, 0x1200))

    machine = run_rom(make_cfg(rom_path, cycles=40, compiled=True, print_display=False))

    assert machine.state.V[0] == 20


def test_run_rom_reports_fault(tmp_path):
    rom_path = tmp_path / "bad.ch8"
    rom_path.write_bytes(program(0x00EE))

    machine = run_rom(make_cfg(rom_path, print_display=False))

    assert machine.halted

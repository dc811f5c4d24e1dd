"""Console logging utilities for chip8vm machines and headless runs.

This module provides a small logging system with level filtering and
colours, a machine-specific logger that formats emulator events, and a tqdm
progress bar for long runs.
"""

import time
import sys
from typing import Optional

from tqdm import tqdm


class ConsoleLogger:
    """Flexible console logger with level filtering and formatters."""

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class MachineLogger(ConsoleLogger):
    """Logger for machine lifecycle and fault events."""

    def __init__(self, name: str = "Machine", **kwargs):
        super().__init__(name, **kwargs)
        self.unknown_opcodes = 0

    def log_machine_start(self, compatibility: str, instruction_frequency: int):
        self.info(
            f"Machine ready: compatibility={compatibility}, "
            f"instruction_frequency={instruction_frequency} Hz"
        )

    def log_rom_loaded(self, size: int, source: Optional[str] = None):
        origin = f" from {source}" if source else ""
        self.info(f"Loaded {size} byte ROM{origin} at 0x200")

    def log_unknown_opcode(self, instruction: int, address: int):
        self.unknown_opcodes += 1
        self.warning(f"Unknown opcode {instruction:#06x} at {address:#05x}, skipped")

    def log_fault(self, error: Exception):
        self.error(f"Machine halted: {error}")

    def log_run_end(self, cycles: int, elapsed: float):
        rate = cycles / elapsed if elapsed > 0 else float("inf")
        self.info(
            f"Ran {cycles:,} cycles in {elapsed:.2f}s ({rate:,.0f} cycles/s), "
            f"{self.unknown_opcodes} unknown opcodes"
        )


def build_progress_bar(n: int, desc: Optional[str] = None, enabled: bool = True, **kwargs) -> tqdm:
    """Build a tqdm progress bar over ``n`` machine cycles."""
    if desc is None:
        desc = f"Running ({n:,} cycles)"

    for kwarg in ("total", "disable"):
        kwargs.pop(kwarg, None)

    return tqdm(total=n, desc=desc, unit="cycle", disable=not enabled, **kwargs)

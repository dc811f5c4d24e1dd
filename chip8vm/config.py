"""Machine configuration."""

import dataclasses
from typing import Any, Mapping

from omegaconf import OmegaConf, DictConfig
from omegaconf.errors import OmegaConfBaseException

from chip8vm.constants import DEFAULT_INSTRUCTION_FREQUENCY
from chip8vm.quirks import Compatibility


@dataclasses.dataclass
class MachineConfig:
    """Construction-time settings of a Machine.

    Attributes:
        compatibility: Dialect name, "new" or "original"
        instruction_frequency: Instructions executed per emulated second (Hz)
        seed: Seed of the PRNG key used by CXNN
        log_level: Console logger level
    """
    compatibility: str = Compatibility.NEW.value
    instruction_frequency: int = DEFAULT_INSTRUCTION_FREQUENCY
    seed: int = 0
    log_level: str = "INFO"

    def __post_init__(self):
        self.compatibility = Compatibility.parse(self.compatibility).value
        if self.instruction_frequency <= 0:
            raise ValueError(
                f"instruction_frequency must be positive, got {self.instruction_frequency}"
            )
        self.log_level = self.log_level.upper()
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log_level '{self.log_level}'")

    @property
    def compatibility_mode(self) -> Compatibility:
        return Compatibility(self.compatibility)

    @classmethod
    def from_dict(cls, cfg: Mapping[str, Any] | DictConfig | None = None) -> "MachineConfig":
        """Build a validated config from a plain mapping or an OmegaConf node."""
        try:
            merged = OmegaConf.merge(OmegaConf.structured(cls), cfg or {})
            return OmegaConf.to_object(merged)
        except OmegaConfBaseException as e:
            raise ValueError(f"Invalid machine config: {e}") from e

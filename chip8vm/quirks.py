"""Compatibility dialects and the quirk flags they select."""

import enum

from flax.struct import dataclass


class Compatibility(enum.Enum):
    """CHIP-8 interpreter dialect, fixed for the lifetime of a machine."""
    ORIGINAL = "original"
    NEW = "new"

    @classmethod
    def parse(cls, value: "str | Compatibility") -> "Compatibility":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown compatibility '{value}'. "
                f"Supported: {[c.value for c in cls]}"
            ) from None


@dataclass(frozen=True)
class Quirks:
    """Behavioral differences between dialects, read once per instruction.

    Attributes:
        shift_copies_source: 8XY6/8XYE copy VY into VX before shifting
        jump_uses_x_register: family 0xB is BXNN (NNN + VX) instead of BNNN (NNN + V0)
        store_load_advances_index: FX55/FX65 leave I pointing past the last register
    """
    shift_copies_source: bool
    jump_uses_x_register: bool
    store_load_advances_index: bool


ORIGINAL_QUIRKS = Quirks(
    shift_copies_source=True,
    jump_uses_x_register=False,
    store_load_advances_index=True,
)

NEW_QUIRKS = Quirks(
    shift_copies_source=False,
    jump_uses_x_register=True,
    store_load_advances_index=False,
)


def quirks_for(compatibility: Compatibility) -> Quirks:
    """Return the quirk flags for a dialect."""
    if compatibility is Compatibility.ORIGINAL:
        return ORIGINAL_QUIRKS
    return NEW_QUIRKS

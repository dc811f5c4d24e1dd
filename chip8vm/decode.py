"""CHIP-8 instruction decoding."""

from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble (instruction family)
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def split(instruction: int) -> tuple[int, int]:
    """Split a 16-bit instruction into (family, rest)."""
    return (instruction & 0xF000) >> 12, instruction & 0x0FFF


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    family, rest = split(instruction)
    return DecodedInstruction(
        raw=instruction,
        opcode=family,
        x=(rest & 0x0F00) >> 8,
        y=(rest & 0x00F0) >> 4,
        n=rest & 0x000F,
        nn=rest & 0x00FF,
        nnn=rest
    )

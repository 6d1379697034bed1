"""CHIP-8 virtual machine: interpreter core plus the contract its host implements"""

from .cpu import Chip8, Instruction, Mode, decode
from .errors import (
    Chip8Error, InvalidKeyIndex, InvalidRegisterIndex, MemoryOutOfBounds,
    RomTooLarge, StackOverflow, StackUnderflow, UnknownOpcode,
)
from .hardware import Hardware, MockHardware
from .quirks import Quirks

__version__ = "0.1.0"

"""fatal conditions raised by the interpreter, none of them is recoverable at the instruction level"""


class Chip8Error(Exception):
    pass


class RomTooLarge(Chip8Error):
    def __init__(self, size, limit):
        super().__init__(f"The ROM is {size} bytes long but at most {limit} bytes fit in memory")
        self.size = size
        self.limit = limit


class MemoryOutOfBounds(Chip8Error, IndexError):
    def __init__(self, address):
        super().__init__(f"Memory access at 0x{address:04x} is outside the 4KB address space")
        self.address = address


class StackOverflow(Chip8Error, IndexError):
    def __init__(self, capacity):
        super().__init__(f"The CHIP-8 stack can contain at most {capacity} addresses. Limit exceeded")
        self.capacity = capacity


class StackUnderflow(Chip8Error, IndexError):
    def __init__(self):
        super().__init__("Tried to return from a subroutine with an empty stack")


class UnknownOpcode(Chip8Error):
    def __init__(self, opcode, address=None):
        where = "" if address is None else f" at 0x{address:04x}"
        super().__init__(f"Unknown opcode 0x{opcode:04x}{where}")
        self.opcode = opcode
        self.address = address


class InvalidRegisterIndex(Chip8Error, IndexError):
    def __init__(self, index):
        super().__init__(f"There is no V{index} register, valid indexes go from 0 to 15")
        self.index = index


class InvalidKeyIndex(Chip8Error, IndexError):
    def __init__(self, index):
        super().__init__(f"There is no key {index} on the keypad, valid keys go from 0x0 to 0xF")
        self.index = index

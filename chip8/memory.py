from .constants import (
    C8_FONTS, DEBUG, FONT_START_ADDRESS, MAX_ROM_SIZE, MEMORY_SIZE,
    REGISTER_COUNT, ROM_START_ADDRESS, STACK_SIZE,
)
from .errors import (
    InvalidRegisterIndex, MemoryOutOfBounds, RomTooLarge,
    StackOverflow, StackUnderflow,
)


# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    def __init__(self):
        self.inner = bytearray(MEMORY_SIZE)
        self.inner[FONT_START_ADDRESS:FONT_START_ADDRESS+len(C8_FONTS)] = bytes(C8_FONTS)

    def __getitem__(self, address):
        return self.read_byte(address)

    def __setitem__(self, address, value):
        self.write_byte(address, value)

    @staticmethod
    def _check(address, length=1):
        """raise if any of the `length` bytes starting at address falls outside the address space"""
        if address < 0:
            raise MemoryOutOfBounds(address)
        if address + length > MEMORY_SIZE:
            raise MemoryOutOfBounds(max(address, MEMORY_SIZE))

    def load(self, rom):
        """copy the program bytes into memory starting at 0x200"""
        rom = bytes(rom)
        if len(rom) > MAX_ROM_SIZE:
            raise RomTooLarge(len(rom), MAX_ROM_SIZE)
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS+len(rom)] = rom
        if DEBUG: print(f"A ROM of {len(rom)} bytes has been loaded at 0x{ROM_START_ADDRESS:04x}")

    def read_byte(self, address):
        self._check(address)
        return self.inner[address]

    def read_word(self, address):
        """read the big-endian 16-bit word stored at address and address+1"""
        self._check(address, 2)
        return self.inner[address] << 8 | self.inner[address + 1]

    def write_byte(self, address, value):
        self._check(address)
        self.inner[address] = value

    def read_bytes(self, address, length):
        self._check(address, length)
        return bytes(self.inner[address:address+length])

    def write_bytes(self, address, data):
        """
        write a block of bytes starting at address
        the whole range is checked before anything gets written
        """
        data = bytes(data)
        self._check(address, len(data))
        self.inner[address:address+len(data)] = data


# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self, capacity=STACK_SIZE):
        self.capacity = capacity
        self.addr_list = []

    def __len__(self):
        return len(self.addr_list)

    def __str__(self):
        return "[" + ", ".join(f"0x{a:04x}" for a in self.addr_list) + "]"

    @property
    def sp(self):
        return len(self.addr_list)

    def push(self, address):
        if len(self.addr_list) >= self.capacity:
            raise StackOverflow(self.capacity)
        self.addr_list.append(address)

    def pop(self):
        if not self.addr_list:
            raise StackUnderflow()
        return self.addr_list.pop()


# ********** V0-VF, THE INDEX REGISTER AND THE PROGRAM COUNTER
class Registers:
    def __init__(self):
        self.v = [0] * REGISTER_COUNT
        self.i = 0      # specify where the sprites reside in memory
        self.pc = ROM_START_ADDRESS

    def __getitem__(self, index):
        self._check(index)
        return self.v[index]

    def __setitem__(self, index, value):
        self._check(index)
        self.v[index] = value & 0xFF    # keep only the lowest 8 bits

    @staticmethod
    def _check(index):
        if not isinstance(index, int) or not 0 <= index < REGISTER_COUNT:
            raise InvalidRegisterIndex(index)

    def __str__(self):
        regs = " ".join(f"V{n:X}={val:02x}" for n, val in enumerate(self.v))
        return f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.i:04x} | {regs}"

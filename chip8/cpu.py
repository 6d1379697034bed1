from collections import namedtuple
from enum import Enum
from functools import wraps

from .constants import (
    DEBUG, FLAG_REGISTER, FONT_CHAR_SIZE, FONT_START_ADDRESS, MAX_TIMER_CATCHUP,
    TIMER_INTERVAL,
)
from .display import Framebuffer
from .errors import Chip8Error, UnknownOpcode
from .keypad import Keypad
from .memory import Memory, Registers, Stack
from .quirks import Quirks
from .timers import Timers


# ******************** DECODING SECTION
# every opcode decodes to the same set of fields, handlers pick the ones they need
# pattern is the opcode with its operand nibbles zeroed and selects the handler
Instruction = namedtuple("Instruction", ["pattern", "opcode", "x", "y", "n", "nn", "nnn"])

# WATCH OUT: masks order is important!!!
# as the for loop breaks out as soon as it finds a match
DECODE_MASKS = (
    (0xFFFF, (0x00E0, 0x00EE)),
    (0xF0FF, (0xE09E, 0xE0A1, 0xF007, 0xF00A, 0xF015, 0xF018, 0xF01E, 0xF029, 0xF033, 0xF055, 0xF065)),
    (0xF00F, (0x5000, 0x8000, 0x8001, 0x8002, 0x8003, 0x8004, 0x8005, 0x8006, 0x8007, 0x800E, 0x9000)),
    (0xF000, (0x1000, 0x2000, 0x3000, 0x4000, 0x6000, 0x7000, 0xA000, 0xB000, 0xC000, 0xD000)),
)


def decode(opcode, address=None):
    """split an opcode in its fields, raise UnknownOpcode if it matches no instruction"""
    for mask, patterns in DECODE_MASKS:
        if (opcode & mask) in patterns:
            pattern = opcode & mask
            break
    else:
        raise UnknownOpcode(opcode, address)
    return Instruction(
        pattern=pattern,
        opcode=opcode,
        x=(opcode & 0x0F00) >> 8,
        y=(opcode & 0x00F0) >> 4,
        n=opcode & 0x000F,
        nn=opcode & 0x00FF,
        nnn=opcode & 0x0FFF,
    )


def asm(msg):
    """decorator to attach the ASM of an instruction to its handler and print it out when debugging"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(self, ins):
            mem_addr = self.fetch_addr
            fn(self, ins)
            if DEBUG: print(f"mem_addr: 0x{mem_addr:04x}    opcode: 0x{ins.opcode:04x}    instruction: {msg.format(**ins._asdict())}")
        wrapper_fn.asm = msg
        return wrapper_fn
    return decorator


class Mode(Enum):
    RUNNING = "running"
    AWAITING_KEY = "awaiting_key"     # suspended on FX0A until a key is pressed


# ******************** CPU SECTION
class Chip8:
    INSTRUCTIONS = {
        0x00E0: "_clear_screen",
        0x00EE: "_return",
        0x1000: "_jump",
        0x2000: "_call_addr",
        0x3000: "_skip_if_eq",
        0x4000: "_skip_if_not_eq",
        0x5000: "_skip_if_eq_regs",
        0x6000: "_set_vk",
        0x7000: "_add_to_vk",
        0x8000: "_set_vx_to_vy",
        0x8001: "_set_vx_or_vy",
        0x8002: "_set_vx_and_vy",
        0x8003: "_set_vx_xor_vy",
        0x8004: "_add_vx_vy",
        0x8005: "_sub_vx_vy",
        0x8006: "_shr",
        0x8007: "_subn_vx_vy",
        0x800E: "_shl",
        0x9000: "_skip_if_not_eq_regs",
        0xA000: "_set_idx",
        0xB000: "_jump_plus",
        0xC000: "_random_byte_and",
        0xD000: "_to_screen",
        0xE09E: "_skip_if_pressed",
        0xE0A1: "_skip_if_not_pressed",
        0xF007: "_set_vx_dt",
        0xF00A: "_wait_keypress",
        0xF015: "_set_dt_vx",
        0xF018: "_set_st",
        0xF01E: "_add_to_idx",
        0xF029: "_select_char",
        0xF033: "_bcd_repr",
        0xF055: "_store_vregs",
        0xF065: "_load_vregs",
    }

    def __init__(self, hardware, quirks=None):
        self.hw = hardware
        self.quirks = quirks if quirks is not None else Quirks()
        self.mem = Memory()
        self.stack = Stack()
        self.regs = Registers()
        self.timers = Timers()
        self.screen = Framebuffer()
        self.keypad = Keypad()
        self.mode = Mode.RUNNING
        self.wait_register = None
        self.fetch_addr = self.regs.pc
        self.cycles = 0
        self.running = False
        self._audio = False
        self.instructions = {pattern: getattr(self, name) for pattern, name in self.INSTRUCTIONS.items()}

    def __str__(self):
        return (f"{self.regs}\n"
                f"STACK:{self.stack} | {self.timers}\n"
                f"KEYPAD:{self.keypad} | MODE:{self.mode.value} | CYCLES:{self.cycles}")

    @property
    def pc(self):
        return self.regs.pc

    @classmethod
    def disassemble(cls, opcode):
        """human readable form of an opcode, e.g. 0x8014 -> 'ADD V0, V1'"""
        ins = decode(opcode)
        return getattr(cls, cls.INSTRUCTIONS[ins.pattern]).asm.format(**ins._asdict())

    # ********** HOST FACING OPERATIONS
    def load(self, rom):
        self.mem.load(rom)

    def set_key(self, key, pressed):
        self.keypad.set_key(key, pressed)

    def tick(self):
        """decrement the timers, the host must call this at 60Hz"""
        self.timers.tick()
        self._update_audio()

    def step(self):
        """
        execute exactly one instruction (fetch, decode, execute)
        while waiting on FX0A it only polls the keypad instead
        if the instruction fails, PC and the rest of the state are left as they were
        """
        self._poll_keys()
        if self.mode is Mode.AWAITING_KEY:
            self._resume_on_keypress()
            return
        self.fetch_addr = self.regs.pc
        # fetch (each instruction is two bytes long)
        opcode = self.mem.read_word(self.fetch_addr)
        ins = decode(opcode, self.fetch_addr)
        self._goto_next_instruction()
        try:
            self.instructions[ins.pattern](ins)
        except Chip8Error:
            self.regs.pc = self.fetch_addr
            raise
        self.cycles += 1

    def run(self, max_steps=None):
        """
        main loop: let the host schedule, catch up with the 60Hz timers, execute one instruction
        stop when the host asks to, when stop() is called or after max_steps instructions
        """
        self.running = True
        steps = 0
        last_tick = self.hw.clock()
        try:
            while self.running:
                if max_steps is not None and steps >= max_steps:
                    break
                if self.hw.sched() or not self.running:
                    break
                now = self.hw.clock()
                if now - last_tick > MAX_TIMER_CATCHUP * TIMER_INTERVAL:
                    # timers are 8-bit, ticks past 255 are no-ops
                    last_tick = now - MAX_TIMER_CATCHUP * TIMER_INTERVAL
                while now - last_tick >= TIMER_INTERVAL:
                    self.tick()
                    last_tick += TIMER_INTERVAL
                self.step()
                steps += 1
        finally:
            self.running = False
        return steps

    def stop(self):
        self.running = False

    # ********** INTERNALS
    def _goto_next_instruction(self):
        self.regs.pc += 0x2

    def _poll_keys(self):
        states = self.hw.get_key_state()
        if states is not None:
            self.keypad.update(states)

    def _resume_on_keypress(self):
        key = self.keypad.first_pressed()
        if key is None:
            return
        self.regs[self.wait_register] = key
        self.wait_register = None
        self.mode = Mode.RUNNING
        self._goto_next_instruction()

    def _update_audio(self):
        active = self.timers.is_sound_active()
        if active != self._audio:
            self._audio = active
            self.hw.set_audio(active)

    def _render(self):
        self.hw.render(self.screen.snapshot())

    # ********** INSTRUCTIONS
    @asm("CLS")
    def _clear_screen(self, ins):
        self.screen.clear()
        self._render()

    @asm("RET")
    def _return(self, ins):
        """return from a subroutine"""
        self.regs.pc = self.stack.pop()

    @asm("JP 0x{nnn:03x}")
    def _jump(self, ins):
        self.regs.pc = ins.nnn

    @asm("CALL 0x{nnn:03x}")
    def _call_addr(self, ins):
        self.stack.push(self.regs.pc)
        self.regs.pc = ins.nnn

    @asm("SE V{x:X}, 0x{nn:02x}")
    def _skip_if_eq(self, ins):
        if self.regs[ins.x] == ins.nn:
            self._goto_next_instruction()

    @asm("SNE V{x:X}, 0x{nn:02x}")
    def _skip_if_not_eq(self, ins):
        if self.regs[ins.x] != ins.nn:
            self._goto_next_instruction()

    @asm("SE V{x:X}, V{y:X}")
    def _skip_if_eq_regs(self, ins):
        if self.regs[ins.x] == self.regs[ins.y]:
            self._goto_next_instruction()

    @asm("SNE V{x:X}, V{y:X}")
    def _skip_if_not_eq_regs(self, ins):
        if self.regs[ins.x] != self.regs[ins.y]:
            self._goto_next_instruction()

    @asm("LD V{x:X}, 0x{nn:02x}")
    def _set_vk(self, ins):
        """set the value of one of the 16 variable registers, Vx"""
        self.regs[ins.x] = ins.nn

    @asm("ADD V{x:X}, 0x{nn:02x}")
    def _add_to_vk(self, ins):
        """add to the value already present in Vx, VF is left untouched even on overflow"""
        self.regs[ins.x] = self.regs[ins.x] + ins.nn

    @asm("LD V{x:X}, V{y:X}")
    def _set_vx_to_vy(self, ins):
        self.regs[ins.x] = self.regs[ins.y]

    @asm("OR V{x:X}, V{y:X}")
    def _set_vx_or_vy(self, ins):
        self.regs[ins.x] = self.regs[ins.x] | self.regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.regs[FLAG_REGISTER] = 0

    @asm("AND V{x:X}, V{y:X}")
    def _set_vx_and_vy(self, ins):
        self.regs[ins.x] = self.regs[ins.x] & self.regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.regs[FLAG_REGISTER] = 0

    @asm("XOR V{x:X}, V{y:X}")
    def _set_vx_xor_vy(self, ins):
        self.regs[ins.x] = self.regs[ins.x] ^ self.regs[ins.y]
        if self.quirks.logic_resets_vf:
            self.regs[FLAG_REGISTER] = 0

    @asm("ADD V{x:X}, V{y:X}")
    def _add_vx_vy(self, ins):
        """set Vx = Vx + Vy, VF = carry"""
        total = self.regs[ins.x] + self.regs[ins.y]
        self.regs[ins.x] = total     # the register keeps only the lowest 8 bits
        self.regs[FLAG_REGISTER] = 1 if total > 0xFF else 0

    @asm("SUB V{x:X}, V{y:X}")
    def _sub_vx_vy(self, ins):
        """set Vx = Vx - Vy, VF = NOT borrow"""
        vx, vy = self.regs[ins.x], self.regs[ins.y]
        self.regs[ins.x] = vx - vy
        self.regs[FLAG_REGISTER] = 1 if vx >= vy else 0

    @asm("SUBN V{x:X}, V{y:X}")
    def _subn_vx_vy(self, ins):
        """set Vx = Vy - Vx, VF = NOT borrow"""
        vx, vy = self.regs[ins.x], self.regs[ins.y]
        self.regs[ins.x] = vy - vx
        self.regs[FLAG_REGISTER] = 1 if vy >= vx else 0

    @asm("SHR V{x:X}, V{y:X}")
    def _shr(self, ins):
        """set Vx = Vx SHR 1, VF = the bit shifted out"""
        value = self.regs[ins.y] if self.quirks.shift_uses_vy else self.regs[ins.x]
        self.regs[ins.x] = value >> 1
        self.regs[FLAG_REGISTER] = value & 0x1

    @asm("SHL V{x:X}, V{y:X}")
    def _shl(self, ins):
        """set Vx = Vx SHL 1, VF = the bit shifted out"""
        value = self.regs[ins.y] if self.quirks.shift_uses_vy else self.regs[ins.x]
        self.regs[ins.x] = value << 1
        self.regs[FLAG_REGISTER] = (value & 0x80) >> 7

    @asm("LD I, 0x{nnn:03x}")
    def _set_idx(self, ins):
        self.regs.i = ins.nnn

    @asm("JP V0, 0x{nnn:03x}")
    def _jump_plus(self, ins):
        if self.quirks.jump_uses_vx:
            self.regs.pc = ins.nnn + self.regs[ins.x]
        else:
            self.regs.pc = ins.nnn + self.regs[0x0]

    @asm("RND V{x:X}, 0x{nn:02x}")
    def _random_byte_and(self, ins):
        self.regs[ins.x] = self.hw.get_random_byte() & ins.nn

    @asm("DRW V{x:X}, V{y:X}, {n}")
    def _to_screen(self, ins):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision"""
        sprite = self.mem.read_bytes(self.regs.i, ins.n)
        x, y = self.regs[ins.x], self.regs[ins.y]
        self.regs[FLAG_REGISTER] = self.screen.draw_sprite(x, y, sprite, wrap=self.quirks.wrap_sprites)
        self._render()

    @asm("SKP V{x:X}")
    def _skip_if_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is pressed"""
        if self.keypad[self.regs[ins.x] & 0xF]:
            self._goto_next_instruction()

    @asm("SKNP V{x:X}")
    def _skip_if_not_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is NOT pressed"""
        if not self.keypad[self.regs[ins.x] & 0xF]:
            self._goto_next_instruction()

    @asm("LD V{x:X}, DT")
    def _set_vx_dt(self, ins):
        self.regs[ins.x] = self.timers.dt

    @asm("LD V{x:X}, K")
    def _wait_keypress(self, ins):
        """wait for a key press and store its value in Vx"""
        key = self.keypad.first_pressed()
        if key is None:
            # stay on the same instruction until a key is pressed
            self.mode = Mode.AWAITING_KEY
            self.wait_register = ins.x
            self.regs.pc = self.fetch_addr
        else:
            self.regs[ins.x] = key

    @asm("LD DT, V{x:X}")
    def _set_dt_vx(self, ins):
        self.timers.dt = self.regs[ins.x]

    @asm("LD ST, V{x:X}")
    def _set_st(self, ins):
        self.timers.st = self.regs[ins.x]
        self._update_audio()

    @asm("ADD I, V{x:X}")
    def _add_to_idx(self, ins):
        total = self.regs.i + self.regs[ins.x]
        self.regs.i = total & 0xFFFF
        if self.quirks.index_overflow_flag:
            self.regs[FLAG_REGISTER] = 1 if total > 0xFFF else 0

    @asm("LD F, V{x:X}")
    def _select_char(self, ins):
        """set I to location of sprite for digit Vx"""
        self.regs.i = FONT_START_ADDRESS + (self.regs[ins.x] & 0xF) * FONT_CHAR_SIZE

    @asm("LD B, V{x:X}")
    def _bcd_repr(self, ins):
        """store the hundreds digit of Vx in memory at I, the tens digit at I+1, the ones digit at I+2"""
        value = self.regs[ins.x]
        self.mem.write_bytes(self.regs.i, (value // 100, value // 10 % 10, value % 10))

    @asm("LD [I], V{x:X}")
    def _store_vregs(self, ins):
        """store registers V0 through Vx (included) in memory starting at location I"""
        self.mem.write_bytes(self.regs.i, self.regs.v[:ins.x+1])
        if self.quirks.load_store_increments_index:
            self.regs.i += ins.x + 1

    @asm("LD V{x:X}, [I]")
    def _load_vregs(self, ins):
        """read registers V0 through Vx (included) from memory starting at location I"""
        data = self.mem.read_bytes(self.regs.i, ins.x + 1)
        self.regs.v[:ins.x+1] = list(data)
        if self.quirks.load_store_increments_index:
            self.regs.i += ins.x + 1

# Historical interpreters disagree on a handful of instructions, see
# https://games.gulrak.net/cadmium/chip8-opcode-table.html#quirk6
# The defaults follow the behaviour most modern ROMs expect.

from dataclasses import dataclass


@dataclass(frozen=True)
class Quirks:
    shift_uses_vy: bool = False                 # 8XY6/8XYE: Vx = Vy before shifting
    load_store_increments_index: bool = False   # FX55/FX65: I = I + X + 1 afterwards
    logic_resets_vf: bool = False               # 8XY1/8XY2/8XY3: VF = 0 afterwards
    index_overflow_flag: bool = False           # FX1E: VF = 1 when I + Vx goes past 0xFFF
    jump_uses_vx: bool = False                  # BXNN: jump to XNN + Vx instead of NNN + V0
    wrap_sprites: bool = False                  # DXYN: wrap pixels past the edges instead of clipping them

    @classmethod
    def cosmac_vip(cls):
        """behaviour of the original COSMAC VIP interpreter"""
        return cls(shift_uses_vy=True, load_store_increments_index=True, logic_resets_vf=True)

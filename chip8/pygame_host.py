"""
reference host for the interpreter, built on pygame

    from chip8 import Chip8
    from chip8.pygame_host import PygameHardware

    chip = Chip8(PygameHardware(caption="PONG"))
    chip.load(rom_bytes)
    chip.run()

the caller is responsible for getting the ROM bytes, this module never touches the filesystem
"""

import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
from array import array

import pygame
from pygame.locals import (
    K_0, K_1, K_2, K_3,
    K_4, K_5, K_6, K_7,
    K_8, K_9, K_a, K_b,
    K_c, K_d, K_e, K_f,
)

from .constants import KEY_COUNT, SCREEN_HEIGHT, SCREEN_WIDTH
from .hardware import Hardware


KEY_MAPPINGS = {
    K_0: 0x0,
    K_1: 0x1,
    K_2: 0x2,
    K_3: 0x3,
    K_4: 0x4,
    K_5: 0x5,
    K_6: 0x6,
    K_7: 0x7,
    K_8: 0x8,
    K_9: 0x9,
    K_a: 0xA,
    K_b: 0xB,
    K_c: 0xC,
    K_d: 0xD,
    K_e: 0xE,
    K_f: 0xF,
}

SCALE = 15
CLOCK_SPEED = 600               # instructions per second
BLUE = pygame.Color(80, 69, 155, 255)
LIGHT_BLUE = pygame.Color(136, 126, 203, 255)
TONE_FREQ = 440                 # buzzer pitch in Hz
SAMPLE_RATE = 44100


def square_wave(freq=TONE_FREQ, sample_rate=SAMPLE_RATE, volume=4096):
    """one period of a signed 16-bit square wave, looped by the mixer"""
    period = sample_rate // freq
    half = period // 2
    return array('h', [volume if i < half else -volume for i in range(period)])


class PygameHardware(Hardware):
    def __init__(self, caption="CHIP-8", s=SCALE, hz=CLOCK_SPEED, bg_color=BLUE, fg_color=LIGHT_BLUE, sound=True):
        self.scale = s
        self.hz = hz
        self.background = bg_color
        self.foreground = fg_color
        self.keys = [False] * KEY_COUNT
        self.beep = None
        pygame.init()
        self.clock_ = pygame.time.Clock()
        pygame.display.set_caption(caption)
        self.surface = pygame.display.set_mode((SCREEN_WIDTH * self.scale, SCREEN_HEIGHT * self.scale))
        self.surface.fill(self.background)
        if sound:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
            self.beep = pygame.mixer.Sound(buffer=square_wave())

    def render(self, framebuffer):
        """
        repaint the whole window from a framebuffer snapshot
        the change becomes visible right away, no need to wait for the next sched
        """
        self.surface.fill(self.background)
        for y, row in enumerate(framebuffer):
            for x, pixel in enumerate(row):
                if pixel:
                    pygame.draw.rect(
                        self.surface,
                        self.foreground,
                        (x * self.scale, y * self.scale, self.scale, self.scale)
                    )
        pygame.display.flip()

    def read_pixel(self, x, y):
        """return 1 if the window shows the pixel as ON, return 0 if it is OFF"""
        p = self.surface.get_at((x * self.scale, y * self.scale))
        return 0 if p == self.background else 1

    def set_audio(self, active):
        if self.beep is None:
            return
        if active:
            self.beep.play(loops=-1)
        else:
            self.beep.stop()

    def get_key_state(self):
        return list(self.keys)

    def sched(self):
        """pace the emulation to hz instructions per second and process the event queue"""
        self.clock_.tick(self.hz)
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return True
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return True
                if event.key in KEY_MAPPINGS:
                    self.keys[KEY_MAPPINGS[event.key]] = True     # register keypress
            elif event.type == pygame.KEYUP and event.key in KEY_MAPPINGS:
                self.keys[KEY_MAPPINGS[event.key]] = False
        return False

    def close(self):
        if self.beep is not None:
            self.beep.stop()
        pygame.quit()

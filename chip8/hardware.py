import random
import time
from abc import ABC, abstractmethod
from itertools import cycle

from .constants import KEY_COUNT


class Hardware(ABC):
    """
    everything the interpreter needs from the machine it runs on
    only render is mandatory, the other capabilities have sensible defaults
    """

    @abstractmethod
    def render(self, framebuffer):
        """show a snapshot (tuple of rows of 0/1 pixels) of the screen"""

    def get_random_byte(self):
        return random.randint(0, 255)

    def set_audio(self, active):
        """turn the buzzer on or off, called only when the sound timer state changes"""

    def get_key_state(self):
        """
        return the state of the 16 keys, or None when the host pushes
        key changes itself through Chip8.set_key
        """
        return None

    def sched(self):
        """called once per main loop iteration, return True to shut the emulator down"""
        return False

    def clock(self):
        """current time in seconds, used to keep the timers at 60Hz"""
        return time.perf_counter()


class MockHardware(Hardware):
    """
    deterministic hardware for tests: fixed random sequence, recorded frames,
    scripted key states (one entry used per poll, the last one is repeated) and
    a clock moving forward by seconds_per_sched on every sched
    """

    def __init__(self, random_bytes=(0,), key_states=None, shutdown_after=None, seconds_per_sched=0.0):
        self.random_bytes = cycle(random_bytes)
        self.key_states = list(key_states) if key_states is not None else None
        self.frames = []
        self.audio = []
        self.sched_calls = 0
        self.shutdown_after = shutdown_after
        self.seconds_per_sched = seconds_per_sched
        self.now = 0.0

    def render(self, framebuffer):
        self.frames.append(framebuffer)

    def get_random_byte(self):
        return next(self.random_bytes)

    def set_audio(self, active):
        self.audio.append(active)

    def get_key_state(self):
        if self.key_states is None:
            return None
        if len(self.key_states) > 1:
            return self.key_states.pop(0)
        return self.key_states[0] if self.key_states else [False] * KEY_COUNT

    def sched(self):
        self.sched_calls += 1
        self.now += self.seconds_per_sched
        return self.shutdown_after is not None and self.sched_calls > self.shutdown_after

    def clock(self):
        return self.now

    @property
    def last_frame(self):
        return self.frames[-1] if self.frames else None


def keys_pressed(*keys):
    """build a 16-key state list with only the given keys pressed"""
    return [k in keys for k in range(KEY_COUNT)]

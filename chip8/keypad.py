from .constants import KEY_COUNT
from .errors import InvalidKeyIndex


class Keypad:
    """
    state of the 16 keys (0x0-0xF) of the hex keypad
    only the host writes it, instructions just read it
    """

    def __init__(self):
        self.keys = [False] * KEY_COUNT

    def __getitem__(self, key):
        return self.is_pressed(key)

    def __setitem__(self, key, value):
        self.set_key(key, value)

    @staticmethod
    def _check(key):
        if not isinstance(key, int) or not 0 <= key < KEY_COUNT:
            raise InvalidKeyIndex(key)

    def set_key(self, key, pressed):
        self._check(key)
        self.keys[key] = bool(pressed)

    def is_pressed(self, key):
        self._check(key)
        return self.keys[key]

    def update(self, states):
        """replace the state of every key at once"""
        states = [bool(s) for s in states]
        if len(states) != KEY_COUNT:
            raise ValueError(f"Expected {KEY_COUNT} key states, got {len(states)}")
        self.keys = states

    def first_pressed(self):
        """get the lowest key currently pressed, None if there isn't one"""
        for key, pressed in enumerate(self.keys):
            if pressed:
                return key
        return None

    def __str__(self):
        return "".join(f"{k:X}" if pressed else "." for k, pressed in enumerate(self.keys))

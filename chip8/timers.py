class Timers:
    """delay and sound timers, both count down toward zero at the rate the host calls tick()"""

    def __init__(self):
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero

    def tick(self):
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            self.st -= 1

    def is_sound_active(self):
        return self.st > 0

    def __str__(self):
        return f"DT:{self.dt} | ST:{self.st}"

from .constants import SCREEN_HEIGHT, SCREEN_WIDTH


class Framebuffer:
    """
    monochrome 64x32 grid of pixels, a pixel is 1 when ON and 0 when OFF
    the only way to change it (besides clear) is XOR-ing sprites on top of it
    """

    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT):
        self.w, self.h = w, h
        self.buffer = [0] * h * w

    def read_pixel(self, x, y):
        """return 1 if pixel is ON, return 0 if pixel is OFF"""
        return self.buffer[y * self.w + x]

    def write_pixel(self, x, y, color):
        self.buffer[y * self.w + x] = 1 if color else 0

    def clear(self):
        self.buffer = [0] * self.h * self.w

    def draw_sprite(self, x, y, sprite, wrap=False):
        """
        XOR each bit of the sprite bytes onto the screen, one byte per row, MSB on the left
        pixels falling past the right or bottom edge are clipped unless wrap is set,
        in which case they reappear on the opposite side
        return 1 if any pixel went from ON to OFF (collision), 0 otherwise
        """
        collision = 0
        for row, sprite_byte in enumerate(sprite):
            y_coordinate = y + row
            if wrap:
                y_coordinate %= self.h
            elif not 0 <= y_coordinate < self.h:
                continue
            for col in range(8):
                bit = (sprite_byte >> (7 - col)) & 0x1
                if not bit:
                    continue    # XOR with 0 leaves the pixel untouched
                x_coordinate = x + col
                if wrap:
                    x_coordinate %= self.w
                elif not 0 <= x_coordinate < self.w:
                    continue
                pixel_state = self.read_pixel(x_coordinate, y_coordinate)
                # the only case when a pixel gets erased is when it was ON and is turned ON again
                if pixel_state == 1:
                    collision = 1
                self.write_pixel(x_coordinate, y_coordinate, pixel_state ^ bit)
        return collision

    def snapshot(self):
        """immutable copy of the screen as a tuple of rows"""
        return tuple(tuple(self.buffer[r * self.w:(r + 1) * self.w]) for r in range(self.h))

    def lit_pixels(self):
        """set of (x, y) coordinates of the pixels that are ON"""
        return {(i % self.w, i // self.w) for i, p in enumerate(self.buffer) if p}

    def __str__(self):
        return "\n".join("".join("#" if p else "." for p in row) for row in self.snapshot())
